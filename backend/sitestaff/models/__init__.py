from sitestaff.models.counterparty import Counterparty
from sitestaff.models.user import User
from sitestaff.models.citizenship import Citizenship
from sitestaff.models.employee import Employee, EmployeeCounterpartyMapping, UserEmployeeMapping
from sitestaff.models.status import Status, EmployeeStatusMapping
from sitestaff.models.setting import Setting

__all__ = [
    "Counterparty",
    "User",
    "Citizenship",
    "Employee",
    "EmployeeCounterpartyMapping",
    "UserEmployeeMapping",
    "Status",
    "EmployeeStatusMapping",
    "Setting",
]

# Import all the models, so that Base has them before being
# imported by Alembic
from sitestaff.db.base_class import Base  # noqa

from sitestaff.models.counterparty import Counterparty  # noqa
from sitestaff.models.user import User  # noqa
from sitestaff.models.citizenship import Citizenship  # noqa
from sitestaff.models.employee import Employee, EmployeeCounterpartyMapping, UserEmployeeMapping  # noqa
from sitestaff.models.status import Status, EmployeeStatusMapping  # noqa
from sitestaff.models.setting import Setting  # noqa

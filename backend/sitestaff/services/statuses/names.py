"""
Status groups and catalog names.

Names follow the `<group>_<value>` convention of the seeded `statuses` table.
"""

from typing import Dict, Tuple

# Groups
GROUP_STATUS = "status"
GROUP_CARD = "status_card"
GROUP_ACTIVE = "status_active"
GROUP_HR = "status_hr"
GROUP_SECURE = "status_secure"

ALL_GROUPS: Tuple[str, ...] = (GROUP_STATUS, GROUP_CARD, GROUP_ACTIVE, GROUP_HR, GROUP_SECURE)

# Groups driven by the transition engine; status_secure is set by administrators only
AUTOMATED_GROUPS: Tuple[str, ...] = (GROUP_STATUS, GROUP_CARD, GROUP_ACTIVE, GROUP_HR)

# status
STATUS_DRAFT = "status_draft"
STATUS_NEW = "status_new"
STATUS_TB_PASSED = "status_tb_passed"
STATUS_PROCESSED = "status_processed"

# status_card
CARD_DRAFT = "status_card_draft"
CARD_COMPLETED = "status_card_completed"

# status_active
ACTIVE_EMPLOYED = "status_active_employed"
ACTIVE_FIRED = "status_active_fired"
ACTIVE_INACTIVE = "status_active_inactive"
ACTIVE_FIRED_COMPL = "status_active_fired_compl"

# status_hr
HR_NEW_COMPL = "status_hr_new_compl"
HR_EDITED = "status_hr_edited"
HR_EDITED_COMPL = "status_hr_edited_compl"
HR_FIRED_OFF = "status_hr_fired_off"
HR_FIRED_COMPL = "status_hr_fired_compl"

# status_secure
SECURE_ALLOW = "status_secure_allow"
SECURE_BLOCK = "status_secure_block"
SECURE_BLOCK_COMPL = "status_secure_block_compl"

STATUS_CATALOG: Dict[str, str] = {
    STATUS_DRAFT: GROUP_STATUS,
    STATUS_NEW: GROUP_STATUS,
    STATUS_TB_PASSED: GROUP_STATUS,
    STATUS_PROCESSED: GROUP_STATUS,
    CARD_DRAFT: GROUP_CARD,
    CARD_COMPLETED: GROUP_CARD,
    ACTIVE_EMPLOYED: GROUP_ACTIVE,
    ACTIVE_FIRED: GROUP_ACTIVE,
    ACTIVE_INACTIVE: GROUP_ACTIVE,
    ACTIVE_FIRED_COMPL: GROUP_ACTIVE,
    HR_NEW_COMPL: GROUP_HR,
    HR_EDITED: GROUP_HR,
    HR_EDITED_COMPL: GROUP_HR,
    HR_FIRED_OFF: GROUP_HR,
    HR_FIRED_COMPL: GROUP_HR,
    SECURE_ALLOW: GROUP_SECURE,
    SECURE_BLOCK: GROUP_SECURE,
    SECURE_BLOCK_COMPL: GROUP_SECURE,
}


def group_of(status_name: str) -> str:
    """Group a catalog name belongs to. KeyError for names outside the catalog."""
    return STATUS_CATALOG[status_name]

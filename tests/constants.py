"""Data variables for tests.

Copyright (c) 2025 MultiFactor
License: https://github.com/MultiDirectoryLab/MultiDirectory/blob/main/LICENSE
"""

from uuid import UUID

DOMAIN_SID = "S-1-5-21-1004336348-1177238915-682003330"
ENTERPRISE_ADMINS_SID = f"{DOMAIN_SID}-519"
DOMAIN_ADMINS_SID = f"{DOMAIN_SID}-512"
HELPDESK_SID = f"{DOMAIN_SID}-1105"
AUTHENTICATED_USERS_SID = "S-1-5-11"

GROUP_CLASS_GUID = UUID("bf967a9c-0de6-11d0-a285-00aa003049e2")
USER_CLASS_GUID = UUID("bf967aba-0de6-11d0-a285-00aa003049e2")
MEMBER_ATTRIBUTE_GUID = UUID("bf9679c0-0de6-11d0-a285-00aa003049e2")

BASE_DN = "DC=ex,DC=com"
ROLES_OU = "OU=Roles,DC=ex,DC=com"
ACTOR = "CN=admin,CN=Users,DC=ex,DC=com"

TRUSTEE_SIDS = {
    "Enterprise Admins": ENTERPRISE_ADMINS_SID,
    "Domain Admins": DOMAIN_ADMINS_SID,
    "Helpdesk": HELPDESK_SID,
}

SCHEMA_GUIDS = {
    "group": GROUP_CLASS_GUID,
    "user": USER_CLASS_GUID,
    "member": MEMBER_ATTRIBUTE_GUID,
}

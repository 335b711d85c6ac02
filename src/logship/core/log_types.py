"""Log type table: symbolic log type code → event name and severity level.

Levels
------
1 = info, 2 = warning, 3 = error, 4 = critical.

`get_log_filter` expands a minimum level into the set of codes at or above
it and merges in any explicitly requested codes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class LogType:
    event: str
    level: int


LOG_TYPES: dict[str, LogType] = {
    "s": LogType("Success Login", 1),
    "ssa": LogType("Success Silent Auth", 1),
    "fsa": LogType("Failed Silent Auth", 3),
    "seacft": LogType("Success Exchange (Authorization Code for Access Token)", 1),
    "feacft": LogType("Failed Exchange (Authorization Code for Access Token)", 3),
    "seccft": LogType("Success Exchange (Client Credentials for Access Token)", 1),
    "feccft": LogType("Failed Exchange (Client Credentials for Access Token)", 3),
    "sepft": LogType("Success Exchange (Password for Access Token)", 1),
    "fepft": LogType("Failed Exchange (Password for Access Token)", 3),
    "sertft": LogType("Success Exchange (Refresh Token for Access Token)", 1),
    "fertft": LogType("Failed Exchange (Refresh Token for Access Token)", 3),
    "f": LogType("Failed Login", 3),
    "w": LogType("Warnings During Login", 2),
    "du": LogType("Deleted User", 1),
    "fu": LogType("Failed Login (invalid email/username)", 3),
    "fp": LogType("Failed Login (wrong password)", 3),
    "fc": LogType("Failed by Connector", 3),
    "fco": LogType("Failed by CORS", 3),
    "con": LogType("Connector Online", 1),
    "coff": LogType("Connector Offline", 3),
    "fcpro": LogType("Failed Connector Provisioning", 4),
    "ss": LogType("Success Signup", 1),
    "fs": LogType("Failed Signup", 3),
    "cs": LogType("Code Sent", 1),
    "cls": LogType("Code/Link Sent", 1),
    "sv": LogType("Success Verification Email", 1),
    "fv": LogType("Failed Verification Email", 3),
    "scp": LogType("Success Change Password", 1),
    "fcp": LogType("Failed Change Password", 3),
    "sce": LogType("Success Change Email", 1),
    "fce": LogType("Failed Change Email", 3),
    "scu": LogType("Success Change Username", 1),
    "fcu": LogType("Failed Change Username", 3),
    "scpn": LogType("Success Change Phone Number", 1),
    "fcpn": LogType("Failed Change Phone Number", 3),
    "svr": LogType("Success Verification Email Request", 1),
    "fvr": LogType("Failed Verification Email Request", 3),
    "scpr": LogType("Success Change Password Request", 1),
    "fcpr": LogType("Failed Change Password Request", 3),
    "fn": LogType("Failed Sending Notification", 3),
    "sapi": LogType("API Operation", 1),
    "fapi": LogType("Failed API Operation", 3),
    "limit_wc": LogType("Blocked Account", 4),
    "limit_mu": LogType("Blocked IP Address", 4),
    "limit_ui": LogType("Too Many Calls to /userinfo", 4),
    "api_limit": LogType("Rate Limit On API", 4),
    "sdu": LogType("Successful User Deletion", 1),
    "fdu": LogType("Failed User Deletion", 3),
    "slo": LogType("Success Logout", 1),
    "flo": LogType("Failed Logout", 3),
    "sd": LogType("Success Delegation", 1),
    "fd": LogType("Failed Delegation", 3),
    "gd_send_sms": LogType("MFA SMS Sent", 1),
    "gd_auth_failed": LogType("MFA Authentication Failed", 4),
    "gd_auth_succeed": LogType("MFA Authentication Succeeded", 1),
    "gd_enrollment_complete": LogType("MFA Enrollment Complete", 1),
    "gd_too_many_failures": LogType("Too Many MFA Failures", 4),
    "depnote": LogType("Deprecation Notice", 2),
    "sys_os_update_start": LogType("Auth0 OS Update Started", 1),
    "sys_os_update_end": LogType("Auth0 OS Update Ended", 1),
    "sys_update_start": LogType("Auth0 Update Started", 1),
    "sys_update_end": LogType("Auth0 Update Ended", 1),
}


def get_log_filter(
    log_types: Iterable[str] | None = None,
    log_level: int | None = None,
    table: dict[str, LogType] | None = None,
) -> list[str]:
    """Union of explicit `log_types` and every code whose level is >= `log_level`.

    The result is deduplicated; explicit codes keep their given order and
    come first. An empty result means "no filtering".
    """
    table = LOG_TYPES if table is None else table
    types = list(log_types or [])
    if log_level:
        types.extend(code for code, lt in table.items() if lt.level >= log_level)
    return list(dict.fromkeys(types))

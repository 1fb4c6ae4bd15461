"""
Attribute selection for user exports.

Maps a verbosity keyword (ALL, VERBOSE, NORMAL, MINIMAL) or a literal
comma-separated attribute list to the columns written to the CSV.
"""

import logging
import re
from typing import Dict, List

from ..exceptions import UnknownVerbosityError
from ..models.attribute_selection import AttributeSelection, VerbosityLevel

logger = logging.getLogger(__name__)

VERBOSE_ATTRIBUTES = [
    "Created",
    "ObjectClass",
    "ObjectGUID",
    "objectSid",
    "MemberOf",
    "CanonicalName",
    "SAMAccountName",
    "Name",
    "DisplayName",
    "GivenName",
    "Initials",
    "OtherName",
    "Description",
    "Title",
    "Enabled",
    "LockedOut",
    "HomeDirectory",
    "HomeDrive",
    "ScriptPath",
    "PasswordExpired",
    "PasswordNeverExpires",
    "PasswordNotRequired",
    "CannotChangePassword",
    "lastLogoff",
    "lastLogon",
    "LastLogonDate",
    "lastLogonTimestamp",
]

NORMAL_ATTRIBUTES = [
    "Created",
    "SAMAccountName",
    "Name",
    "DisplayName",
    "Description",
    "LastLogonDate",
]

MINIMAL_ATTRIBUTES = ["SAMAccountName", "Name", "LastLogonDate"]

KEYWORD_ATTRIBUTES: Dict[VerbosityLevel, List[str]] = {
    VerbosityLevel.ALL: [],
    VerbosityLevel.VERBOSE: VERBOSE_ATTRIBUTES,
    VerbosityLevel.NORMAL: NORMAL_ATTRIBUTES,
    VerbosityLevel.MINIMAL: MINIMAL_ATTRIBUTES,
}


def select_attributes(verbosity: str) -> AttributeSelection:
    """
    Resolve a verbosity token into an attribute selection.

    Keywords are matched case-insensitively. Anything containing a comma is
    an explicit attribute list: whitespace is removed, the list is split on
    commas, order and duplicates are kept and empty items dropped, so a
    single attribute can be requested as "mail,".

    Args:
        verbosity: Keyword or comma-separated attribute list

    Returns:
        AttributeSelection: The level and ordered attribute names

    Raises:
        UnknownVerbosityError: If the token is neither a keyword nor a list
    """
    token = (verbosity or "").strip()

    for level, attributes in KEYWORD_ATTRIBUTES.items():
        if token.upper() == level.name:
            return AttributeSelection(level=level, attributes=list(attributes))

    if "," in token:
        attributes = [name for name in re.sub(r"\s+", "", token).split(",") if name]
        if attributes:
            logger.debug(f"Using custom attribute list: {attributes}")
            return AttributeSelection(level=VerbosityLevel.CUSTOM, attributes=attributes)

    keywords = ", ".join(level.value for level in KEYWORD_ATTRIBUTES)
    raise UnknownVerbosityError(
        f"Unknown verbosity '{verbosity}'. Use one of {keywords} "
        f"or a comma-separated attribute list (e.g. 'mail,' for a single attribute)"
    )

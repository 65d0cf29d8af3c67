# framecraft/checks - Member design checks
"""Combined stress check against allowable stresses (steel-like and timber)."""

from .section import (
    CheckStatus,
    SectionCheckResult,
    check_member_section,
    check_sections,
    governing_member,
    member_strength,
)

__all__ = [
    'CheckStatus',
    'SectionCheckResult',
    'check_member_section',
    'check_sections',
    'governing_member',
    'member_strength',
]

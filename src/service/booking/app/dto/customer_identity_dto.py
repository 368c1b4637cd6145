from typing import Optional

import attrs


@attrs.define(frozen=True)
class CustomerIdentity:
    """Authenticated customer as asserted by the upstream auth gateway"""

    phone: str
    name: str = ''
    email: Optional[str] = None

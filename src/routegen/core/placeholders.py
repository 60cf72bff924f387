from __future__ import annotations

import re

PLACEHOLDER = re.compile(r"\{\w+\}")


def extract_placeholders(template: str) -> list[str]:
    """
    Return placeholder names of a URL template in order of appearance.
      "/users/{id}/posts/{post}" -> ["id", "post"]
    Duplicates are kept; no validation of the names happens here.
    """
    return [m.group(0)[1:-1] for m in PLACEHOLDER.finditer(template)]  # "{abc}" -> "abc"

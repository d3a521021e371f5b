from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .utils import clamp, parse_flag, parse_int

WaitCondition = Literal["load", "domcontentloaded", "networkidle"]
WAIT_CONDITIONS = ("load", "domcontentloaded", "networkidle")

# name: (default, minimum, maximum)
NUMERIC_BOUNDS = {
    "w": (1200, 300, 3000),
    "h": (800, 200, 3000),
    "delay": (0, 0, 5000),
    "timeoutMs": (12000, 2000, 20000),
}

META_FIELDS = {"url", "w", "h", "full", "wait", "delay", "block_ads", "timeout_ms"}


class ScreenshotParams(BaseModel):
    """Normalized query parameters for a single capture"""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    w: int = 1200
    h: int = 800
    full: bool = False
    wait: WaitCondition = "load"
    delay: int = 0
    block_ads: bool = Field(False, alias="blockAds")
    timeout_ms: int = Field(12000, alias="timeoutMs")
    ua: str = ""
    format: Literal["png", "json"] = "png"

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "ScreenshotParams":
        """Apply defaults and clamps to raw query values; never raises on bad input"""
        # A zero counts as unset, so w=0 or timeoutMs=0 gets the default
        numbers = {
            name: clamp(parse_int(query.get(name), default) or default, minimum, maximum)
            for name, (default, minimum, maximum) in NUMERIC_BOUNDS.items()
        }

        wait = (query.get("wait") or "load").strip().lower()
        if wait not in WAIT_CONDITIONS:
            wait = "load"

        fmt = (query.get("format") or "png").strip().lower()

        return cls(
            url=(query.get("url") or "").strip(),
            full=parse_flag(query.get("full")),
            wait=wait,
            block_ads=parse_flag(query.get("blockAds")),
            ua=(query.get("ua") or "").strip(),
            format="json" if fmt == "json" else "png",
            **numbers,
        )

    def meta(self) -> Dict[str, Any]:
        """Request metadata echoed back in JSON responses"""
        return self.model_dump(by_alias=True, include=META_FIELDS)


class ScreenshotResult(BaseModel):
    url: str
    success: bool
    image: Optional[bytes] = None
    etag: Optional[str] = None
    mime: str = "image/png"
    file_size: Optional[int] = None
    dimensions: Optional[Dict[str, int]] = None
    error: Optional[str] = None

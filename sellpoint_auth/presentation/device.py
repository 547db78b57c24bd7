"""Device fingerprint (browser family + major, OS family, device family) from a User-Agent."""

from __future__ import annotations

from ua_parser import user_agent_parser

from sellpoint_auth.domain.entities import DeviceFingerprint

OTHER = "Other"

# used when the parser cannot name the hardware
_DEVICE_BY_OS = {
    "Windows": "Desktop",
    "Linux": "Desktop",
    "Mac OS X": "Desktop",
    "macOS": "Desktop",
    "Android": "Mobile",
    "iOS": "Mobile",
}


def _browser(user_agent: dict) -> str:
    family = user_agent.get("family") or OTHER
    major = user_agent.get("major")
    return f"{family} {major}" if major else family


def device_from_user_agent(user_agent: str | None) -> DeviceFingerprint:
    parsed = user_agent_parser.Parse((user_agent or "").strip())

    os_family = parsed["os"].get("family") or OTHER
    device = parsed["device"].get("family") or OTHER
    if device == OTHER:
        device = _DEVICE_BY_OS.get(os_family, OTHER)

    return DeviceFingerprint(
        browser=_browser(parsed["user_agent"]), os=os_family, device=device
    )

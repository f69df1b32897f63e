"""Cache key builders, one per data category.

Parts are joined with ``:`` so ``standings:12:3`` and ``standings:1:23``
can never collide.
"""

from __future__ import annotations

SEP = ":"


def _join(*parts: object) -> str:
    out = []
    for part in parts:
        if isinstance(part, bool):
            raise TypeError("bool is not a valid key part")
        if isinstance(part, int):
            out.append(str(part))
            continue
        text = str(part)
        if not text or SEP in text:
            raise ValueError(f"invalid key part: {text!r}")
        out.append(text)
    return SEP.join(out)


def bootstrap() -> str:
    return "bootstrap-static"


def fixtures() -> str:
    return "fixtures"


def live_gw(gw: int) -> str:
    return _join("live-gw", gw)


def standings(league_id: int, page: int = 1) -> str:
    return _join("standings", league_id, page)


def _entry_key(tag: str, *ids: int, auth: bool) -> str:
    key = _join(tag, *ids)
    return f"{key}{SEP}auth" if auth else key


def entry(entry_id: int, auth: bool = False) -> str:
    return _entry_key("entry", entry_id, auth=auth)


def entry_history(entry_id: int, auth: bool = False) -> str:
    return _entry_key("entry-history", entry_id, auth=auth)


def entry_event(entry_id: int, gw: int, auth: bool = False) -> str:
    return _entry_key("entry-event", entry_id, gw, auth=auth)


def entry_transfers(entry_id: int, auth: bool = False) -> str:
    return _entry_key("entry-transfers", entry_id, auth=auth)


def element_summary(player_id: int) -> str:
    return _join("element-summary", player_id)


def calculated(kind: str, **params: object) -> str:
    """Key for a derived result; params are ordered by name."""
    parts: list[object] = ["calc", kind]
    for name in sorted(params):
        value = params[name]
        if isinstance(value, bool):
            raise TypeError(f"bool is not a valid key param: {name}")
        parts.append(f"{name}={value}")
    return _join(*parts)

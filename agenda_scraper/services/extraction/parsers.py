"""Heuristic parsers turning scraped text into booking models.

These functions never touch the browser: strategies feed them the rendered
text lines, element snapshots or intercepted payloads they collected.
"""

import re
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from agenda_scraper.core.enums import SlotState
from agenda_scraper.models.schemas import Practitioner, Specialty, TimeSlot
from agenda_scraper.utils.text import normalize, split_lines

T = TypeVar("T")

# Lines that are widget chrome rather than data
_NOISE_RE = re.compile(
    r"\b(reservar|especialidad(es)?|seleccione|volver|atras|buscar|back|search|select)\b"
)
_NAV_LABEL_RE = re.compile(
    r"^(reservar( hora)?|por especialidad|por profesional|volver|atras|buscar|seleccione.*|"
    r"siguiente|anterior|inicio)$"
)

_SPECIALTY_MARKER_RE = re.compile(r"especialidad(?:es)?\s*[:\s]\s*(.*)$", re.IGNORECASE)
_BRANCH_RE = re.compile(r"^\s*(?:sucursal|sede|centro|lugar)\s*:\s*(.+?)\s*$", re.IGNORECASE)
_NEXT_SLOT_RE = re.compile(
    r"^\s*(?:pr[oó]xima\s+(?:hora|disponibilidad|fecha)|disponible\s+desde)\s*:?\s*(.+?)\s*$",
    re.IGNORECASE,
)
_NAME_EXCLUDE_RE = re.compile(r"especialidad|seleccione", re.IGNORECASE)

_TIME_RE = re.compile(r"(?<![\d:])(\d{1,2}):(\d{2})(?![\d])")
_SLOT_LINE_RE = re.compile(r"(?:^|\s)(\d{1,2}:\d{2})(?![\d:])")
_TAKEN_RE = re.compile(r"\b(no disponible|ocupado|reservado)\b")
_AVAILABLE_RE = re.compile(r"\bdisponible\b")

TIME_KEYS = frozenset(
    {"time", "hora", "start", "slot", "hour", "available", "schedule", "timeslot", "availabletime"}
)


def dedupe(items: Iterable[T], key: Callable[[T], str]) -> List[T]:
    """Drop items whose key was already seen, keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        k = key(item)
        if not k or k in seen:
            continue
        seen.add(k)
        result.append(item)
    return result


def is_navigation_label(text: Optional[str]) -> bool:
    """True for button labels of the widget itself (e.g. "Reservar hora")."""
    return bool(_NAV_LABEL_RE.match(normalize(text)))


def pad_time(raw: str) -> Optional[str]:
    """
    Zero-pad ``H:MM`` to ``HH:MM``.

    Returns:
        Normalized time, or None when hours or minutes are out of range
    """
    match = _TIME_RE.search(raw)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"


# Specialties


def parse_specialty_items(items: Iterable[Dict[str, Any]]) -> List[Specialty]:
    """
    Build specialties from element snapshots (``text``, ``title``, ``value``).

    The title attribute wins over rendered text because labels are often
    truncated on screen.
    """
    specialties = []
    for item in items:
        title = (item.get("title") or "").strip()
        text = " ".join((item.get("text") or "").split())
        label = title or text
        if len(label) <= 3 or is_navigation_label(label):
            continue
        value = (item.get("value") or "").strip() or label
        specialties.append(Specialty(text=label, value=value))
    return dedupe(specialties, key=lambda s: normalize(s.text))


def parse_specialty_lines(lines: Iterable[str]) -> List[Specialty]:
    """Fallback: every body line that is long enough and not widget chrome."""
    specialties = []
    for line in lines:
        label = " ".join(line.split())
        if len(label) <= 4 or _NOISE_RE.search(normalize(label)):
            continue
        if _SLOT_LINE_RE.search(label):
            continue
        specialties.append(Specialty(text=label, value=label))
    return dedupe(specialties, key=lambda s: normalize(s.text))


# Practitioners


def _looks_like_name(line: str) -> bool:
    if len(line) <= 3 or _NAME_EXCLUDE_RE.search(line):
        return False
    if _BRANCH_RE.match(line) or _NEXT_SLOT_RE.match(line):
        return False
    return not is_navigation_label(line)


def _fill_details(practitioner: Practitioner, lines: List[str]) -> None:
    for line in lines:
        if practitioner.branch is None:
            branch = _BRANCH_RE.match(line)
            if branch:
                practitioner.branch = branch.group(1)
                continue
        if practitioner.next_slot is None:
            next_slot = _NEXT_SLOT_RE.match(line)
            if next_slot:
                practitioner.next_slot = next_slot.group(1)


def parse_practitioner_lines(
    lines: List[str], specialty: Optional[str] = None
) -> List[Practitioner]:
    """
    Parse practitioner cards rendered as plain text.

    A card is recognised by an ``Especialidad:`` line; the line right above it
    is the practitioner's name. Lines after the marker, up to the next card,
    may carry the branch (``Sucursal:``/``Sede:``) and a next-slot hint.

    Args:
        lines: Trimmed, non-empty body lines
        specialty: Specialty requested, used when the marker line has no value

    Returns:
        Practitioners in page order, de-duplicated by normalized name
    """
    markers = [i for i, line in enumerate(lines) if _SPECIALTY_MARKER_RE.search(line)]
    practitioners = []
    for position, idx in enumerate(markers):
        if idx == 0:
            continue
        name = lines[idx - 1].strip()
        if not _looks_like_name(name):
            continue

        stated = _SPECIALTY_MARKER_RE.search(lines[idx]).group(1).strip(" :-")
        practitioner = Practitioner(
            name=name, value=name, specialty=stated or specialty or None
        )

        # The next card starts at the name line above the next marker
        end = markers[position + 1] - 1 if position + 1 < len(markers) else len(lines)
        _fill_details(practitioner, lines[idx + 1 : max(end, idx + 1)])
        practitioners.append(practitioner)

    return dedupe(practitioners, key=lambda p: normalize(p.name))


def parse_practitioner_cards(
    items: Iterable[Dict[str, Any]], specialty: Optional[str] = None
) -> List[Practitioner]:
    """Build practitioners from card element snapshots: first text line is the name."""
    practitioners = []
    for item in items:
        lines = split_lines(item.get("text"))
        if not lines:
            continue
        name = lines[0]
        if len(name) <= 5 or not _looks_like_name(name):
            continue
        stated = None
        for line in lines[1:]:
            marker = _SPECIALTY_MARKER_RE.search(line)
            if marker:
                stated = marker.group(1).strip(" :-") or None
                break
        value = (item.get("value") or item.get("title") or "").strip() or name
        practitioner = Practitioner(name=name, value=value, specialty=stated or specialty)
        _fill_details(practitioner, lines[1:])
        practitioners.append(practitioner)
    return dedupe(practitioners, key=lambda p: normalize(p.name))


# Time slots


def slot_state(line: str) -> SlotState:
    """Classify a rendered slot line by its status keyword; no keyword is unknown."""
    folded = normalize(line)
    if _TAKEN_RE.search(folded):
        return SlotState.TAKEN
    if _AVAILABLE_RE.search(folded):
        return SlotState.AVAILABLE
    return SlotState.UNKNOWN


def parse_slot_lines(lines: Iterable[str]) -> List[TimeSlot]:
    """
    Extract bookable times from rendered lines such as ``09:00 DISPONIBLE``.

    Only the first time on a line is read, taken slots are dropped and the
    first occurrence of each time wins.
    """
    slots = []
    for line in lines:
        match = _SLOT_LINE_RE.search(line)
        if not match:
            continue
        time = pad_time(match.group(1))
        if time is None:
            continue
        state = slot_state(line)
        if state == SlotState.TAKEN:
            continue
        slots.append(TimeSlot(time=time, state=state))
    return dedupe(slots, key=lambda s: s.time)


def find_times_in_text(text: Optional[str]) -> List[str]:
    """Every valid ``HH:MM`` in ``text``, in order, without duplicates."""
    times = (pad_time(m.group(0)) for m in _TIME_RE.finditer(text or ""))
    return dedupe((t for t in times if t), key=lambda t: t)


def find_times_in_payload(payload: Any) -> List[str]:
    """
    Walk a decoded JSON payload looking for clock times.

    Strings inside lists are checked directly; inside objects only values under
    time-like keys (``hora``, ``start``, ``timeSlot`` ...) are. Nested
    containers are always walked.
    """
    found: List[str] = []

    def walk(node: Any) -> None:
        if isinstance(node, list):
            for item in node:
                if isinstance(item, str):
                    time = pad_time(item)
                    if time:
                        found.append(time)
                else:
                    walk(item)
        elif isinstance(node, dict):
            for key, value in node.items():
                if isinstance(value, str) and str(key).lower() in TIME_KEYS:
                    time = pad_time(value)
                    if time:
                        found.append(time)
                elif isinstance(value, (dict, list)):
                    walk(value)

    walk(payload)
    return dedupe(found, key=lambda t: t)


def slots_from_times(times: Iterable[str]) -> List[TimeSlot]:
    """Slots whose availability the source did not state."""
    return dedupe(
        (TimeSlot(time=t, state=SlotState.UNKNOWN) for t in times), key=lambda s: s.time
    )

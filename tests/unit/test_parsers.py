"""Tests for the text and payload parsers used by extraction strategies."""

import pytest

from agenda_scraper.core.enums import SlotState
from agenda_scraper.models.schemas import dump_wire
from agenda_scraper.services.extraction.parsers import (
    find_times_in_payload,
    find_times_in_text,
    is_navigation_label,
    pad_time,
    parse_practitioner_cards,
    parse_practitioner_lines,
    parse_slot_lines,
    parse_specialty_items,
    parse_specialty_lines,
    slot_state,
    slots_from_times,
)


class TestPadTime:
    """Tests for pad_time()."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("7:05", "07:05"), ("09:00", "09:00"), ("23:59", "23:59"), ("a las 8:30 hrs", "08:30")],
    )
    def test_valid(self, raw, expected):
        assert pad_time(raw) == expected

    @pytest.mark.parametrize("raw", ["24:00", "10:60", "no time", ""])
    def test_invalid(self, raw):
        assert pad_time(raw) is None


class TestSpecialtyParsing:
    """Tests for specialty list parsing."""

    def test_items_prefer_title_and_skip_navigation(self):
        items = [
            {"text": "KINESIOLOGÍA", "title": "KINESIOLOGÍA ADULTO", "value": "12"},
            {"text": "Reservar hora", "title": "", "value": ""},
            {"text": "abc", "title": "", "value": ""},
            {"text": "Kinesiología adulto", "title": "", "value": ""},
            {"text": "FONOAUDIOLOGÍA", "title": "", "value": ""},
        ]

        specialties = parse_specialty_items(items)

        assert [s.text for s in specialties] == ["KINESIOLOGÍA ADULTO", "FONOAUDIOLOGÍA"]
        assert specialties[0].value == "12"
        assert specialties[1].value == "FONOAUDIOLOGÍA"

    def test_body_lines_filter_widget_chrome(self):
        lines = [
            "Reservar hora",
            "Por especialidad",
            "KINESIOLOGÍA",
            "Fonoaudiología",
            "09:30 DISPONIBLE",
            "Volver",
            "KINESIOLOGIA",
        ]

        specialties = parse_specialty_lines(lines)

        assert [s.text for s in specialties] == ["KINESIOLOGÍA", "Fonoaudiología"]

    def test_empty_input(self):
        assert parse_specialty_items([]) == []
        assert parse_specialty_lines([]) == []

    @pytest.mark.parametrize("label", ["Reservar Hora", "POR ESPECIALIDAD", "volver", "Atrás"])
    def test_navigation_labels(self, label):
        assert is_navigation_label(label)

    def test_specialty_is_not_navigation_label(self):
        assert not is_navigation_label("Kinesiología")


class TestPractitionerParsing:
    """Tests for practitioner list parsing."""

    def test_name_precedes_specialty_marker(self):
        lines = ["Dr. Ana Lopez", "Especialidad: Kinesiología", "Sucursal: Centro"]

        practitioners = parse_practitioner_lines(lines)

        assert len(practitioners) == 1
        assert practitioners[0].name == "Dr. Ana Lopez"
        assert practitioners[0].specialty == "Kinesiología"
        assert practitioners[0].branch == "Centro"

    def test_multiple_cards_keep_their_own_details(self):
        lines = [
            "Seleccione un profesional",
            "Dr. Ana Lopez",
            "Especialidad: Kinesiología",
            "Sucursal: Centro",
            "Dr. Pedro Rojas",
            "Especialidad: Kinesiología",
            "Próxima hora: Lunes 10:00",
        ]

        practitioners = parse_practitioner_lines(lines)

        assert [p.name for p in practitioners] == ["Dr. Ana Lopez", "Dr. Pedro Rojas"]
        assert practitioners[0].branch == "Centro"
        assert practitioners[0].next_slot is None
        assert practitioners[1].branch is None
        assert practitioners[1].next_slot == "Lunes 10:00"

    def test_duplicates_keep_first_seen(self):
        lines = [
            "Dr. Ana Lopez",
            "Especialidad: Kinesiología",
            "Sucursal: Centro",
            "DR. ANA LÓPEZ",
            "Especialidad: Kinesiología",
            "Sucursal: Providencia",
        ]

        practitioners = parse_practitioner_lines(lines)

        assert len(practitioners) == 1
        assert practitioners[0].branch == "Centro"

    def test_blank_marker_uses_requested_specialty(self):
        practitioners = parse_practitioner_lines(
            ["Juan Perez", "Especialidad:"], specialty="Kinesiología"
        )

        assert practitioners[0].specialty == "Kinesiología"

    def test_marker_on_first_line_has_no_name(self):
        assert parse_practitioner_lines(["Especialidad: Kinesiología"]) == []

    def test_wire_names(self):
        practitioners = parse_practitioner_lines(
            ["Dr. Ana Lopez", "Especialidad: Kinesiología", "Sucursal: Centro"]
        )

        assert dump_wire(practitioners) == [
            {
                "nombre": "Dr. Ana Lopez",
                "value": "Dr. Ana Lopez",
                "especialidad": "Kinesiología",
                "sucursal": "Centro",
            }
        ]

    def test_cards(self):
        items = [
            {
                "text": "Dra. María Soto\nEspecialidad: Fonoaudiología\nSede: Providencia\n"
                "Próxima hora: 12/06 10:00",
                "title": "",
                "value": "",
            },
            {"text": "Seleccione", "title": "", "value": ""},
            {"text": "", "title": "", "value": ""},
        ]

        practitioners = parse_practitioner_cards(items, specialty="Fonoaudiología")

        assert len(practitioners) == 1
        card = practitioners[0]
        assert card.name == "Dra. María Soto"
        assert card.specialty == "Fonoaudiología"
        assert card.branch == "Providencia"
        assert card.next_slot == "12/06 10:00"
        assert card.value == "Dra. María Soto"


class TestSlotParsing:
    """Tests for time slot parsing."""

    def test_duplicates_and_taken_slots_are_dropped(self):
        slots = parse_slot_lines(["09:00 DISPONIBLE", "09:00 DISPONIBLE", "10:30 OCUPADO"])

        assert dump_wire(slots) == [{"hora": "09:00", "estado": "DISPONIBLE"}]

    def test_unlabelled_times_are_kept_as_unknown(self):
        slots = parse_slot_lines(["Lunes 12 de junio", "9:15", "11:45 NO DISPONIBLE", "12:00"])

        assert [s.time for s in slots] == ["09:15", "12:00"]
        assert all(s.state == SlotState.UNKNOWN for s in slots)

    def test_state_follows_keyword(self):
        slots = parse_slot_lines(["09:00", "10:00 DISPONIBLE"])

        assert dump_wire(slots) == [
            {"hora": "09:00", "estado": "DESCONOCIDO"},
            {"hora": "10:00", "estado": "DISPONIBLE"},
        ]

    @pytest.mark.parametrize(
        "line,state",
        [
            ("09:00 Disponible", SlotState.AVAILABLE),
            ("09:00 no disponible", SlotState.TAKEN),
            ("09:00 OCUPADO", SlotState.TAKEN),
            ("09:00", SlotState.UNKNOWN),
        ],
    )
    def test_slot_state(self, line, state):
        assert slot_state(line) == state

    def test_reserved_is_taken(self):
        assert parse_slot_lines(["08:00 Reservado"]) == []

    def test_times_in_text(self):
        assert find_times_in_text("Horas: 9:00, 10:30 y 25:00 y 9:00") == ["09:00", "10:30"]
        assert find_times_in_text(None) == []

    def test_times_in_payload_read_time_keys_only(self):
        payload = {
            "data": [{"hora": "9:00", "id": "5"}, {"hora": "10:30"}],
            "generated": "12:00",
            "extra": {"slots": ["08:15", "junk"]},
        }

        assert find_times_in_payload(payload) == ["09:00", "10:30", "08:15"]

    def test_times_in_payload_empty(self):
        assert find_times_in_payload({"ok": True}) == []
        assert find_times_in_payload(None) == []

    def test_slots_from_times_have_unknown_state(self):
        slots = slots_from_times(["09:00", "09:00", "10:00"])

        assert [s.time for s in slots] == ["09:00", "10:00"]
        assert all(s.state == SlotState.UNKNOWN for s in slots)

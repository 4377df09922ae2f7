"""Tests for API payload builders."""

import json
from datetime import date

from agenda_scraper.core.enums import SlotState
from agenda_scraper.models.schemas import Practitioner, Specialty, TimeSlot
from agenda_scraper.services.responses import (
    failure_payload,
    numbered,
    practitioners_payload,
    slots_payload,
    specialties_payload,
)


def test_numbered():
    assert numbered(["A", "B"]) == "1. A\n2. B"
    assert numbered([]) == ""


def test_specialties_payload_views():
    payload = specialties_payload(
        "kineyfisio", [Specialty(text="KINESIOLOGÍA", value="KINESIOLOGÍA")]
    )

    assert payload["success"] is True
    assert payload["total"] == 1
    assert payload["especialidades"] == ["KINESIOLOGÍA"]
    assert payload["especialidades_values"] == ["KINESIOLOGÍA"]
    assert payload["especialidades_text"] == "1. KINESIOLOGÍA"
    assert payload["especialidades_objects"] == [{"text": "KINESIOLOGÍA", "value": "KINESIOLOGÍA"}]
    assert json.loads(payload["especialidades_raw"]) == payload["especialidades_objects"]


def test_empty_specialties_payload():
    payload = specialties_payload("cesmed", [])

    assert payload["total"] == 0
    assert payload["especialidades"] == []
    assert payload["especialidades_text"] == ""


def test_practitioners_payload():
    payload = practitioners_payload(
        "kineyfisio",
        "Kinesiología",
        [Practitioner(name="Dr. Ana Lopez", value="Dr. Ana Lopez", branch="Centro")],
    )

    assert payload["especialidad"] == "Kinesiología"
    assert payload["profesionales"] == ["Dr. Ana Lopez"]
    assert payload["profesionales_objects"][0]["sucursal"] == "Centro"


def test_slots_payload_defaults_date_to_today():
    payload = slots_payload("kineyfisio", "Kine", "Ana", [TimeSlot(time="09:00")])

    assert payload["fecha"] == date.today().isoformat()
    assert payload["horas"] == ["09:00"]
    assert payload["horas_objects"] == [{"hora": "09:00", "estado": SlotState.AVAILABLE.value}]


def test_slots_payload_echoes_date():
    payload = slots_payload("kineyfisio", "Kine", "Ana", [], fecha="2024-06-12")

    assert payload["fecha"] == "2024-06-12"
    assert payload["total"] == 0


def test_failure_payload():
    assert failure_payload("boom") == {"success": False, "error": "boom"}
    assert failure_payload("boom", "cesmed")["agenda"] == "cesmed"

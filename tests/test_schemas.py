import pytest
from pydantic import ValidationError

from painel.schemas.appointment import CreateAppointment
from painel.schemas.auth import Role, Session, UserProfile
from painel.schemas.client import Client
from painel.schemas.schedule_block import CreateScheduleBlock


def test_session_expiry():
    session = Session(access_token="t", user_id="u", expires_at=100)
    assert not session.is_expired(now=50)
    assert session.is_expired(now=100)
    assert not Session(access_token="t", user_id="u").is_expired()


@pytest.mark.parametrize("role", [None, "root", ""])
def test_unrecognised_roles_fall_back_to_user(role):
    assert UserProfile(id="u", role=role).role == Role.USER


def test_client_produtos_from_bad_json():
    assert Client(id=1, produtos="not json").produtos == []
    assert Client(id=1, produtos='{"a": 1}').produtos == []
    assert Client(id=1, produtos=None).produtos == []


def test_block_may_end_same_day_later():
    block = CreateScheduleBlock(
        descricao="Reunião", data_inicio="2024-05-10", data_fim="2024-05-10", hora_inicio="09:00", hora_fim="10:00",
    )
    assert block.tipo.value == "geral"


def test_block_cannot_end_before_start_on_same_day():
    with pytest.raises(ValidationError):
        CreateScheduleBlock(
            descricao="Reunião", data_inicio="2024-05-10", data_fim="2024-05-10", hora_inicio="10:00", hora_fim="09:00",
        )


def test_appointment_assignee_id_is_not_stored():
    appointment = CreateAppointment(
        cliente_nome="Acme", funcionario_nome="Carlos", funcionario_id=1, data="2024-05-10", hora="10:00", tipo="Visita",
    )
    dumped = appointment.model_dump(mode="json")
    assert "funcionario_id" not in dumped
    assert dumped["hora"] == "10:00:00"

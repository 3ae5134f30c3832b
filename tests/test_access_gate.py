from contextlib import asynccontextmanager
import asyncio

import pytest

from painel.exceptions import InvalidCredentials, ProviderUnavailable
from painel.services.access_gate import AccessGate, Decision
from painel.services.auth_store import AuthStatus
from painel.schemas.auth import Role
from tests.fakes import FakeIdentityProvider, InMemoryDataProvider, make_session, wait_until

ADMIN = make_session("admin-1", "admin@example.com")
USER = make_session("user-1", "user@example.com")

PROFILES = [
    {"id": "admin-1", "email": "admin@example.com", "role": "admin", "nome": "Admin"},
    {"id": "user-1", "email": "user@example.com", "role": "user", "nome": "Bia"},
]


class SlowDataProvider(InMemoryDataProvider):
    """Profile lookups wait until ``release`` is set."""

    def __init__(self, tables=None):
        super().__init__(tables)
        self.release = asyncio.Event()

    async def select(self, table, columns="*", **filters):
        if table == "profiles":
            await self.release.wait()
        return await super().select(table, columns, **filters)


@asynccontextmanager
async def running(gate):
    await gate.start()
    try:
        yield gate
    finally:
        await gate.stop()


def gate_for(session=None, profiles=PROFILES, timeout=1.0, data=None):
    identity = FakeIdentityProvider(session)
    data = data or InMemoryDataProvider({"profiles": profiles})
    return AccessGate(identity, data, timeout=timeout), identity, data


def status_is(gate, status):
    return lambda: gate.snapshot.status == status


# -------- Resolution --------
@pytest.mark.asyncio
async def test_starts_loading():
    gate, _, _ = gate_for(ADMIN)
    assert gate.snapshot.status == AuthStatus.LOADING
    assert gate.resolve_access() == Decision.SHOW_LOADING_INDICATOR


@pytest.mark.asyncio
async def test_existing_admin_session_resolves_to_admin():
    gate, _, _ = gate_for(ADMIN)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_ADMIN))
        assert gate.snapshot.profile.nome == "Admin"
        assert gate.resolve_access(Role.ADMIN) == Decision.ALLOW


@pytest.mark.asyncio
async def test_existing_user_session_resolves_to_user():
    gate, _, _ = gate_for(USER)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_USER))
        assert gate.resolve_access() == Decision.ALLOW
        assert gate.resolve_access(Role.ADMIN) == Decision.REDIRECT_TO_FORBIDDEN


@pytest.mark.asyncio
async def test_no_session_resolves_to_unauthenticated():
    gate, _, _ = gate_for(None)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.UNAUTHENTICATED))
        assert gate.resolve_access() == Decision.REDIRECT_TO_LOGIN


@pytest.mark.asyncio
async def test_missing_profile_grants_user_only():
    gate, _, _ = gate_for(ADMIN, profiles=[])
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_USER))
        assert gate.snapshot.profile is None
        assert gate.resolve_access(Role.ADMIN) == Decision.REDIRECT_TO_FORBIDDEN


@pytest.mark.asyncio
async def test_profile_lookup_failure_grants_user_only():
    gate, _, data = gate_for(ADMIN)
    data.failures["profiles"] = ProviderUnavailable("down")
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_USER))
        assert not gate.snapshot.is_admin


@pytest.mark.asyncio
async def test_unknown_role_is_treated_as_user():
    profiles = [{"id": "admin-1", "email": "admin@example.com", "role": "superuser"}]
    gate, _, _ = gate_for(ADMIN, profiles=profiles)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_USER))
        assert gate.snapshot.role == Role.USER


@pytest.mark.asyncio
async def test_initial_check_error_resolves_to_unauthenticated():
    gate, identity, _ = gate_for(ADMIN)
    identity.initial_error = ProviderUnavailable("network down")
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.UNAUTHENTICATED))


@pytest.mark.asyncio
async def test_hanging_provider_times_out_to_unauthenticated():
    gate, identity, _ = gate_for(ADMIN, timeout=0.05)
    identity.initial_release = asyncio.Event()
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.UNAUTHENTICATED), timeout=1.0)


@pytest.mark.asyncio
async def test_hanging_profile_lookup_settles_as_user():
    data = SlowDataProvider({"profiles": PROFILES})
    gate, _, _ = gate_for(ADMIN, timeout=0.05, data=data)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_USER), timeout=1.0)
        assert gate.snapshot.session == ADMIN


@pytest.mark.asyncio
async def test_expired_session_is_cleared_on_access():
    expired = make_session("admin-1", "admin@example.com", expires_at=1)
    gate, _, _ = gate_for(None)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.UNAUTHENTICATED))
        gate.store.publish(gate.snapshot.model_copy(update={"status": AuthStatus.AUTHENTICATED_ADMIN, "session": expired}))
        assert gate.resolve_access() == Decision.REDIRECT_TO_LOGIN
        assert gate.snapshot.status == AuthStatus.UNAUTHENTICATED


# -------- Ordering --------
@pytest.mark.asyncio
async def test_event_before_stale_initial_result_converges():
    gate, identity, _ = gate_for(None)
    identity.initial_release = asyncio.Event()
    async with running(gate):
        await asyncio.sleep(0)
        # The initial check already captured "no session"; the event arrives first
        identity.emit(ADMIN)
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_ADMIN))

        identity.initial_release.set()
        await asyncio.sleep(0.02)
        await gate.settled()
        assert gate.snapshot.status == AuthStatus.AUTHENTICATED_ADMIN


@pytest.mark.asyncio
async def test_initial_result_before_event_converges():
    gate, identity, _ = gate_for(ADMIN)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_ADMIN))
        identity.emit(ADMIN)
        await gate.settled()
        assert gate.snapshot.status == AuthStatus.AUTHENTICATED_ADMIN


@pytest.mark.asyncio
async def test_callback_only_enqueues():
    gate, identity, data = gate_for(None)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.UNAUTHENTICATED))
        identity.emit(USER)
        # Nothing ran inside the callback itself
        assert ("select", "profiles") not in data.calls
        await gate.settled()
        assert ("select", "profiles") in data.calls
        assert gate.snapshot.status == AuthStatus.AUTHENTICATED_USER


@pytest.mark.asyncio
async def test_single_subscription_removed_on_stop():
    gate, identity, _ = gate_for(None)
    await gate.start()
    assert len(identity.listeners) == 1
    await gate.stop()
    assert identity.listeners == []


@pytest.mark.asyncio
async def test_no_mutation_after_stop():
    gate, identity, _ = gate_for(None)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.UNAUTHENTICATED))
    gate._on_session_change(ADMIN)
    await asyncio.sleep(0.02)
    assert gate.snapshot.status == AuthStatus.UNAUTHENTICATED


# -------- Sign in / sign out --------
@pytest.mark.asyncio
async def test_sign_in_with_valid_credentials():
    gate, identity, _ = gate_for(None)
    identity.users["admin@example.com"] = ("secret", ADMIN)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.UNAUTHENTICATED))
        session = await gate.sign_in("admin@example.com", "secret")
        await gate.settled()
        assert session == ADMIN
        assert gate.snapshot.status == AuthStatus.AUTHENTICATED_ADMIN


@pytest.mark.asyncio
async def test_sign_in_with_invalid_credentials_keeps_state():
    gate, identity, _ = gate_for(None)
    identity.users["admin@example.com"] = ("secret", ADMIN)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.UNAUTHENTICATED))
        with pytest.raises(InvalidCredentials):
            await gate.sign_in("admin@example.com", "wrong")
        assert gate.snapshot.status == AuthStatus.UNAUTHENTICATED


@pytest.mark.asyncio
async def test_sign_out_is_idempotent():
    gate, identity, _ = gate_for(ADMIN)
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_ADMIN))
        await gate.sign_out()
        await gate.sign_out()
        await gate.settled()
        assert gate.snapshot.status == AuthStatus.UNAUTHENTICATED
        assert gate.snapshot.session is None
        assert identity.sign_out_calls == 2


@pytest.mark.asyncio
async def test_sign_out_clears_state_when_provider_fails():
    gate, identity, _ = gate_for(ADMIN)
    identity.sign_out_error = ProviderUnavailable("offline")
    async with running(gate):
        await wait_until(status_is(gate, AuthStatus.AUTHENTICATED_ADMIN))
        await gate.sign_out()
        assert gate.snapshot.status == AuthStatus.UNAUTHENTICATED


@pytest.mark.asyncio
async def test_sign_out_during_profile_lookup_discards_late_result():
    data = SlowDataProvider({"profiles": PROFILES})
    gate, _, _ = gate_for(ADMIN, data=data)
    async with running(gate):
        # Let the consumer pick up the session and block on the profile lookup
        await asyncio.sleep(0.02)
        assert gate.snapshot.status == AuthStatus.LOADING
        await gate.sign_out()
        assert gate.snapshot.status == AuthStatus.UNAUTHENTICATED

        data.release.set()
        await gate.settled()
        assert gate.snapshot.status == AuthStatus.UNAUTHENTICATED


@pytest.mark.asyncio
async def test_slow_profile_lookup_never_signs_out_a_valid_session():
    data = SlowDataProvider({"profiles": PROFILES})
    gate, _, _ = gate_for(ADMIN, timeout=0.1, data=data)
    seen = []
    gate.store.subscribe(lambda s: seen.append((s.status, s.session is not None)))
    async with running(gate):
        await wait_until(lambda: len(seen) >= 2, timeout=1.0)
        assert (AuthStatus.UNAUTHENTICATED, False) not in seen
        assert seen[0] == (AuthStatus.AUTHENTICATED_USER, True)

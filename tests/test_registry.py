import pytest

from agent_keeper.adapters.registry import AdapterRegistry
from agent_keeper.constants import ACTIVE_ADAPTER_STATE_KEY
from agent_keeper.errors import NoActiveAdapterError, UnknownAdapterError
from agent_keeper.state import MemoryStateStore

from conftest import FakeAdapter


def test_set_active_adapter_persists_choice() -> None:
    state = MemoryStateStore()
    registry = AdapterRegistry(state)
    registry.register(FakeAdapter("alpha"))

    registry.set_active_adapter("alpha")

    assert registry.get_active_adapter().id == "alpha"
    assert state.get(ACTIVE_ADAPTER_STATE_KEY) == "alpha"


def test_unknown_adapter_is_rejected() -> None:
    registry = AdapterRegistry()

    with pytest.raises(UnknownAdapterError):
        registry.set_active_adapter("nope")


def test_require_active_adapter_without_selection() -> None:
    registry = AdapterRegistry()
    registry.register(FakeAdapter("alpha"))

    assert registry.get_active_adapter() is None
    with pytest.raises(NoActiveAdapterError):
        registry.require_active_adapter()


def test_restore_active_adapter_from_state() -> None:
    state = MemoryStateStore({ACTIVE_ADAPTER_STATE_KEY: "beta"})
    registry = AdapterRegistry(state)
    registry.register(FakeAdapter("alpha"))
    registry.register(FakeAdapter("beta"))

    assert registry.restore_active_adapter().id == "beta"


def test_restore_ignores_unregistered_id() -> None:
    state = MemoryStateStore({ACTIVE_ADAPTER_STATE_KEY: "gone"})
    registry = AdapterRegistry(state)
    registry.register(FakeAdapter("alpha"))

    assert registry.restore_active_adapter() is None
    assert registry.get_active_adapter() is None


def test_detect_activates_single_detected_adapter() -> None:
    registry = AdapterRegistry(MemoryStateStore())
    registry.register(FakeAdapter("alpha", detected=False))
    registry.register(FakeAdapter("beta", detected=True))

    assert registry.detect_and_activate().id == "beta"
    assert registry.get_active_adapter().id == "beta"


@pytest.mark.parametrize("flags", [(False, False), (True, True)])
def test_detect_leaves_selection_when_ambiguous(flags) -> None:
    registry = AdapterRegistry(MemoryStateStore())
    registry.register(FakeAdapter("alpha", detected=flags[0]))
    registry.register(FakeAdapter("beta", detected=flags[1]))

    assert registry.detect_and_activate() is None
    assert registry.get_active_adapter() is None


def test_registering_same_id_replaces_adapter() -> None:
    registry = AdapterRegistry()
    first = FakeAdapter("alpha")
    second = FakeAdapter("alpha")
    registry.register(first)
    registry.register(second)

    assert registry.all_adapters() == [second]
    assert registry.get_adapter("alpha") is second

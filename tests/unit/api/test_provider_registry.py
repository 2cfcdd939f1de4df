from delivery_status_sync.api.providers.base import ProviderAdapter
from delivery_status_sync.api.registry import ProviderRegistry, build_adapters
from delivery_status_sync.models.env_cfg import SyncSettings


class _NullTransport:
    def get(self, *a, **k):
        raise AssertionError("not called")

    post = get


def test_build_adapters_registers_builtin_providers():
    adapters = build_adapters(SyncSettings(), transport=_NullTransport())
    assert sorted(adapters) == ["paperfly", "pathao", "redx", "steadfast"]
    assert all(isinstance(a, ProviderAdapter) for a in adapters.values())
    assert adapters["paperfly"].requires_composite_id


def test_build_adapters_applies_base_url_overrides():
    settings = SyncSettings(REDX_BASE_URL="http://redx.mock/", PAPERFLY_TRACKER_URL="http://pf.mock/t.php")
    adapters = build_adapters(settings, transport=_NullTransport())

    assert adapters["redx"].base_url == "http://redx.mock"
    assert adapters["paperfly"].base_url == "http://pf.mock/t.php"
    assert adapters["steadfast"].base_url == "https://portal.packzy.com/api/v1"


def test_decorator_registration_is_case_insensitive():
    reg = ProviderRegistry()

    @reg.register("eCourier")
    class ECourierAdapter(ProviderAdapter):
        provider_id = "ecourier"

    built = reg.build(_NullTransport())
    assert list(built) == ["ecourier"]
    assert isinstance(built["ecourier"], ECourierAdapter)

import pytest
from django.core.exceptions import ImproperlyConfigured

from surrogate_cache.backends.fastly import FastlyBackend
from surrogate_cache.backends.locmem import LocMemBackend
from surrogate_cache.conf import (
    REGISTERED_SETTINGS,
    Setting,
    SettingsResolver,
    clear_settings_cache,
    get_backend_class,
    get_purge_backend,
    get_setting,
    get_settings,
)
from surrogate_cache.utils import absint


class TestSetting:
    def test_default_is_sanitized_at_registration(self):
        setting = Setting("ttl", "-30", absint)
        assert setting.default == 30

    def test_every_registered_setting_has_a_sanitizer(self):
        for name, setting in REGISTERED_SETTINGS.items():
            assert setting.name == name
            assert callable(setting.sanitizer)


class TestSettingsResolver:
    def test_defaults(self):
        resolver = SettingsResolver(source=lambda: {})
        assert resolver.get_setting("surrogate_control_ttl") == 300
        assert resolver.get_setting("stale_if_error_ttl") == 86400
        assert resolver.get_setting("allow_purge_all") is False
        assert resolver.get_setting("api_endpoint") == "https://api.fastly.com/"
        assert resolver.get_setting("default_purge_type") == "soft"

    def test_override_is_sanitized(self):
        resolver = SettingsResolver(
            source=lambda: {
                "surrogate_control_ttl": "-600",
                "fastly_key": "abc-123",
                "allow_purge_all": "1",
            }
        )
        assert resolver.get_setting("surrogate_control_ttl") == 600
        assert resolver.get_setting("fastly_key") == "abc123"
        assert resolver.get_setting("allow_purge_all") is True

    def test_unknown_setting_is_empty(self):
        resolver = SettingsResolver(source=lambda: {"not_a_setting": 1})
        assert resolver.get_setting("not_a_setting") == ""
        assert "not_a_setting" not in resolver.resolve()

    def test_default_is_stable(self):
        resolver = SettingsResolver(source=lambda: {})
        first = resolver.get_setting("stale_if_error_ttl")
        second = resolver.get_setting("stale_if_error_ttl")
        assert first == second == REGISTERED_SETTINGS["stale_if_error_ttl"].default

    def test_resolves_once(self):
        calls = []

        def source():
            calls.append(1)
            return {}

        resolver = SettingsResolver(source=source)
        resolver.get_setting("fastly_key")
        resolver.get_setting("fastly_service_id")
        assert len(calls) == 1

    def test_sanitizers_not_rerun(self):
        calls = []

        def counting(value):
            calls.append(value)
            return value

        registry = {"ttl": Setting("ttl", 5, counting)}
        resolver = SettingsResolver(registry=registry, source=lambda: {})
        calls.clear()
        resolver.get_setting("ttl")
        resolver.get_setting("ttl")
        assert calls == []

    def test_clear(self):
        overrides = {"surrogate_control_ttl": 10}
        resolver = SettingsResolver(source=lambda: overrides)
        assert resolver.get_setting("surrogate_control_ttl") == 10
        overrides["surrogate_control_ttl"] = 20
        assert resolver.get_setting("surrogate_control_ttl") == 10
        resolver.clear()
        assert resolver.get_setting("surrogate_control_ttl") == 20


class TestDjangoSettings:
    def test_reads_surrogate_cache(self, settings):
        settings.SURROGATE_CACHE = {"surrogate_control_ttl": 900}
        clear_settings_cache()

        assert get_setting("surrogate_control_ttl") == 900

    def test_missing_surrogate_cache(self, settings):
        if hasattr(settings, "SURROGATE_CACHE"):
            del settings.SURROGATE_CACHE
        clear_settings_cache()

        assert get_setting("surrogate_control_ttl") == 300

    def test_get_settings_is_a_copy(self):
        resolved = get_settings()
        resolved["surrogate_control_ttl"] = 1
        assert get_setting("surrogate_control_ttl") == 300


class TestGetBackendClass:
    def test_builtin_name(self):
        assert get_backend_class("fastly") == FastlyBackend
        assert get_backend_class("locmem") == LocMemBackend

    def test_dotted_path(self):
        cls = get_backend_class("surrogate_cache.backends.locmem.LocMemBackend")
        assert cls == LocMemBackend

    def test_unknown_raises(self):
        with pytest.raises(ImproperlyConfigured, match="Unknown purge backend"):
            get_backend_class("nope.Backend")


class TestGetPurgeBackend:
    def test_from_settings(self, settings):
        settings.SURROGATE_CACHE = {"purge_backend": "locmem"}
        clear_settings_cache()

        assert isinstance(get_purge_backend(), LocMemBackend)

    def test_default_is_fastly(self):
        assert isinstance(get_purge_backend(), FastlyBackend)

    def test_caches_backend(self):
        assert get_purge_backend("locmem") is get_purge_backend("locmem")

    def test_clear_settings_cache(self):
        backend = get_purge_backend("locmem")
        clear_settings_cache()
        assert get_purge_backend("locmem") is not backend

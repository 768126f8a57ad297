"""Tests for configuration and money helpers"""
from decimal import Decimal

import pytest

from storecart.config import TTL, load_settings
from storecart.money import format_money, parse_price, round_money, to_decimal, to_json_number


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("STORECART_BACKEND", "ORDER_TTL_MS", "DELIVERY_FEE", "EXPIRATION_CHECK_INTERVAL"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings.backend == "file"
        assert settings.order_ttl_ms == TTL.ORDER == 36_000_000
        assert settings.expiration_check_interval == 60
        assert settings.delivery_fee == Decimal("30")
        assert settings.order_id_prefix == "ORD-"
        assert settings.key_prefix == "yakebda_"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("STORECART_BACKEND", "redis")
        monkeypatch.setenv("ORDER_TTL_MS", "60000")
        monkeypatch.setenv("DELIVERY_FEE", "25.5")
        monkeypatch.setenv("EXPIRATION_CHECK_INTERVAL", "5")

        settings = load_settings()

        assert settings.backend == "redis"
        assert settings.order_ttl_ms == 60_000
        assert settings.delivery_fee == Decimal("25.5")
        assert settings.expiration_check_interval == 5.0

    @pytest.mark.parametrize("name,value", [
        ("ORDER_TTL_MS", "ten hours"),
        ("ORDER_TTL_MS", "-1"),
        ("DELIVERY_FEE", "-3"),
        ("EXPIRATION_CHECK_INTERVAL", "0"),
        ("STORECART_BACKEND", "sqlite"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError):
            load_settings()


class TestMoney:
    def test_to_decimal_lenient(self):
        assert to_decimal(None) == 0
        assert to_decimal("junk") == 0
        assert to_decimal(0.1) == Decimal("0.1")

    def test_parse_price_strict(self):
        assert parse_price("45") == Decimal("45")
        with pytest.raises(ValueError):
            parse_price("junk")

    def test_round_money(self):
        assert round_money("2.345") == Decimal("2.35")
        assert round_money("2.5", to_int=True) == Decimal("3")

    def test_format_money(self):
        assert format_money(Decimal("230.00")) == "230 EGP"
        assert format_money("1250.5", "EGP") == "1,250.50 EGP"

    def test_to_json_number(self):
        assert to_json_number(Decimal("100.00")) == 100
        assert isinstance(to_json_number(Decimal("100.00")), int)
        assert to_json_number(Decimal("12.5")) == 12.5

"""Tests for the RequestHelpers facade."""

import logging

import pytest
from flask import g

from backoffice.database.connection import DatabaseConnection
from backoffice.services.container import get_container
from backoffice.services.translator import Translator
from backoffice.web.flash import FlashBag
from backoffice.web.utils.request_helpers import (
    HelperContext,
    InvalidTimeUnitError,
    RequestHelpers,
    shared_view_data,
)


@pytest.fixture
def db():
    return DatabaseConnection(":memory:")


@pytest.fixture
def helpers(app, fake_mockably, db):
    context = HelperContext(
        settings=get_container().get("settings"),
        lang=Translator(),
        mockably=fake_mockably,
        log=logging.getLogger("backoffice.performance"),
        db=db,
        started_at=fake_mockably.now,
    )
    return RequestHelpers(context)


class TestTimeDifference:

    @pytest.mark.parametrize("elapsed, unit, expected", [
        (90.5, "ms", 90500),
        (90.5, "s", 90),
        (90.5, "m", 1),
        (150.75, "m", 2),
        (0.25, "ms", 250),
        (0.25, "s", 0),
        (59.5, "m", 0),
    ])
    def test_units_truncate(self, helpers, fake_mockably, elapsed, unit, expected):
        record = fake_mockably.now - elapsed
        assert helpers.get_current_time_difference(record, unit) == expected

    def test_default_unit_is_minutes(self, helpers, fake_mockably):
        assert helpers.get_current_time_difference(fake_mockably.now - 180.0) == 3

    def test_returns_int(self, helpers, fake_mockably):
        result = helpers.get_current_time_difference(fake_mockably.now - 1.5, "s")
        assert isinstance(result, int)

    @pytest.mark.parametrize("unit", ["x", "", "h", "MS", "seconds"])
    def test_unknown_unit_raises(self, helpers, fake_mockably, unit):
        with pytest.raises(InvalidTimeUnitError):
            helpers.get_current_time_difference(fake_mockably.now, unit)

    def test_unknown_unit_is_value_error(self, helpers):
        with pytest.raises(ValueError):
            helpers.get_current_time_difference(0.0, "h")


class TestViewData:

    def test_init_base_controller_shares_defaults(self, app, helpers):
        with app.test_request_context("/admin/"):
            helpers.init_base_controller()
            data = shared_view_data()

        assert data["cms_name"] == "Backoffice"
        assert data["backend_prefix"] == "/admin"
        assert data["locale"] == "en"
        assert data["environment"] == "test"
        assert data["debug"] is False
        assert data["title"] == "Backoffice"

    def test_init_base_controller_twice_is_harmless(self, app, helpers):
        with app.test_request_context("/admin/"):
            helpers.init_base_controller()
            first = shared_view_data()
            helpers.init_base_controller()
            assert shared_view_data() == first

    def test_init_base_controller_keeps_page_title(self, app, helpers):
        with app.test_request_context("/admin/"):
            helpers.set_page_title("dashboard")
            helpers.init_base_controller()
            assert shared_view_data()["title"] == "Dashboard"

    def test_init_base_controller_switches_locale(self, make_app, fake_mockably):
        app = make_app(BACKEND_LANGUAGE="de")
        settings = get_container().get("settings")
        lang = Translator()
        helpers = RequestHelpers(HelperContext(
            settings=settings,
            lang=lang,
            mockably=fake_mockably,
            log=logging.getLogger("backoffice.performance"),
            db=DatabaseConnection(":memory:"),
        ))

        with app.test_request_context("/admin/"):
            helpers.init_base_controller()
            helpers.set_page_title("dashboard")
            assert lang.locale == "de"
            assert shared_view_data()["title"] == "Übersicht"

    @pytest.mark.parametrize("page_name, expected", [
        ("dashboard", "Dashboard"),
        ("login", "Login"),
        ("Custom Page", "Custom Page"),
        ("", ""),
    ])
    def test_set_page_title(self, app, helpers, page_name, expected):
        with app.test_request_context("/admin/"):
            helpers.set_page_title(page_name)
            assert shared_view_data()["title"] == expected


class TestForceSSL:

    def test_insecure_request_redirects_to_https(self, app, helpers):
        with app.test_request_context("/admin/login?next=1", base_url="http://example.com"):
            response = helpers.force_ssl()

        assert response is not None
        assert response.status_code == 302
        assert response.headers["Location"] == "https://example.com/admin/login?next=1"

    def test_secure_request_returns_none(self, app, helpers):
        with app.test_request_context("/admin/login", base_url="https://example.com"):
            assert helpers.force_ssl() is None


class TestForce404:

    def test_renders_not_found_view(self, app, helpers):
        with app.test_request_context("/admin/missing"):
            helpers.init_base_controller()
            response = helpers.force_404()

            assert shared_view_data()["title"] == "Page not found"

        assert response.status_code == 404
        body = response.get_data(as_text=True)
        assert "404 - Not Found" in body
        assert "Page not found | Backoffice" in body


class TestRedirectWithFlashMessage:

    def test_redirects_back_to_referrer(self, app, helpers):
        referrer = "http://localhost/admin/login"
        with app.test_request_context("/admin/save", method="POST", headers={"Referer": referrer}):
            response = helpers.redirect_with_flash_message("status", "Saved!")
            pending = FlashBag().pending()

        assert response.status_code == 302
        assert response.headers["Location"] == referrer
        assert pending == {"status": "Saved!"}

    def test_without_referrer_redirects_to_root(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            response = helpers.redirect_with_flash_message("status", "Saved!")

        assert response.headers["Location"] == "/"

    def test_named_route_and_status(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            response = helpers.redirect_with_flash_message("status", "Saved!", "home", [], 303)

        assert response.status_code == 303
        assert response.headers["Location"] == "/home"

    def test_positional_parameters_fill_placeholders_in_order(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            response = helpers.redirect_with_flash_message("status", "Saved!", "item", [5, "blue-shirt"])

        assert response.headers["Location"] == "/items/5/blue-shirt"

    def test_mapping_parameters(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            response = helpers.redirect_with_flash_message(
                "status", "Saved!", "item", {"slug": "hat", "item_id": 7}
            )

        assert response.headers["Location"] == "/items/7/hat"

    def test_too_many_parameters(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            with pytest.raises(ValueError):
                helpers.redirect_with_flash_message("status", "Saved!", "home", [1])

    def test_endpoint_with_several_rules_uses_the_fitting_one(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            paged = helpers.redirect_with_flash_message("status", "Saved!", "posts", [2])
            first = helpers.redirect_with_flash_message("status", "Saved!", "posts", [])

            with pytest.raises(ValueError):
                helpers.redirect_with_flash_message("status", "Saved!", "posts", [2, 3])

        assert paged.headers["Location"] == "/posts/2"
        assert first.headers["Location"] == "/posts"

    def test_extra_headers(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            response = helpers.redirect_with_flash_message(
                "status", "Saved!", "home", headers={"X-Saved-Id": "42"}
            )

        assert response.headers["X-Saved-Id"] == "42"

    def test_non_redirect_status_rejected_before_flashing(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            with pytest.raises(ValueError):
                helpers.redirect_with_flash_message("status", "Saved!", "home", status=200)
            assert FlashBag().pending() == {}

    def test_last_write_wins(self, app, helpers):
        with app.test_request_context("/admin/save", method="POST"):
            helpers.redirect_with_flash_message("status", "First")
            helpers.redirect_with_flash_message("status", "Second")
            assert FlashBag().pending() == {"status": "Second"}


class InvalidArgumentError(ValueError):
    pass


class EmptyNameError(InvalidArgumentError):
    pass


class TestHandleMultipleExceptions:

    def test_base_type_entry_matches_subtype(self, helpers):
        error = EmptyNameError("name")
        assert helpers.handle_multiple_exceptions(error, {"InvalidArgumentError": "Bad input"}) == "Bad input"

    def test_most_specific_entry_wins_regardless_of_order(self, helpers):
        catalog = {
            "Exception": "Something failed",
            "InvalidArgumentError": "Bad input",
            "EmptyNameError": "Name is required",
        }
        assert helpers.handle_multiple_exceptions(EmptyNameError(), catalog) == "Name is required"
        assert helpers.handle_multiple_exceptions(InvalidArgumentError(), catalog) == "Bad input"
        assert helpers.handle_multiple_exceptions(KeyError("k"), catalog) == "Something failed"

    def test_class_and_dotted_keys(self, helpers):
        assert helpers.handle_multiple_exceptions(EmptyNameError(), {ValueError: "value"}) == "value"

        dotted = f"{__name__}.InvalidArgumentError"
        assert helpers.handle_multiple_exceptions(EmptyNameError(), {dotted: "dotted"}) == "dotted"

    def test_no_match_reraises_original(self, helpers):
        error = EmptyNameError("name")

        with pytest.raises(EmptyNameError) as excinfo:
            helpers.handle_multiple_exceptions(error, {"KeyError": "missing"})

        assert excinfo.value is error

    def test_empty_catalog_reraises(self, helpers):
        with pytest.raises(RuntimeError):
            helpers.handle_multiple_exceptions(RuntimeError("boom"), {})


class TestLogPerformance:

    def test_logs_duration_and_resources(self, app, helpers, fake_mockably, db, caplog):
        caplog.set_level(logging.INFO, logger="backoffice.performance")
        with db.connection() as conn:
            conn.execute("SELECT 1")

        with app.test_request_context("/admin/ping"):
            g.request_started_at = fake_mockably.now - 0.25
            helpers.log_performance()

        records = [r for r in caplog.records if r.name == "backoffice.performance"]
        assert len(records) == 1
        assert records[0].levelno == logging.INFO
        message = records[0].getMessage()
        assert "http://localhost/admin/ping" in message
        assert "time: 250ms" in message
        assert "memory: 12.50MB" in message
        assert "modules: 321" in message
        assert "queries: 1" in message

    def test_falls_back_to_context_start_and_keeps_locale(self, app, helpers, caplog):
        caplog.set_level(logging.INFO, logger="backoffice.performance")
        helpers.context.lang.set_locale("de")

        with app.test_request_context("/admin/"):
            helpers.log_performance()

        assert helpers.context.lang.locale == "de"
        assert "Performance:" in caplog.text
        assert "time: 0ms" in caplog.text

"""Tests for the click increment that runs after a cached redirect."""

import logging

import pytest

from app.services.background_tasks import increment_click_background
from fakes import make_link


class TestIncrementClickBackground:

    @pytest.mark.asyncio
    async def test_records_click(self, store, fake_gist):
        fake_gist.seed({"abc": make_link("abc", clicks=2)})

        await increment_click_background(store, "abc")

        assert fake_gist.table()["links"]["abc"]["clicks"] == 3

    @pytest.mark.asyncio
    async def test_write_failure_is_logged_not_raised(self, store, fake_gist, caplog):
        fake_gist.seed({"abc": make_link("abc", clicks=2)})
        fake_gist.fail_writes = True

        with caplog.at_level(logging.ERROR, logger="app.services.background_tasks"):
            await increment_click_background(store, "abc")

        assert "Failed to increment click count for abc" in caplog.text
        assert fake_gist.table()["links"]["abc"]["clicks"] == 2

    @pytest.mark.asyncio
    async def test_read_failure_is_logged_not_raised(self, store, fake_gist, caplog):
        fake_gist.seed({"abc": make_link("abc")})
        fake_gist.fail_reads = True

        with caplog.at_level(logging.ERROR, logger="app.services.background_tasks"):
            await increment_click_background(store, "abc")

        assert "Failed to increment click count for abc" in caplog.text

    @pytest.mark.asyncio
    async def test_deleted_link_is_not_recreated(self, store, fake_gist, caplog):
        with caplog.at_level(logging.WARNING, logger="app.services.background_tasks"):
            await increment_click_background(store, "gone")

        assert "Click for gone dropped" in caplog.text
        assert "gone" not in fake_gist.table()["links"]

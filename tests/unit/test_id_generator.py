"""Tests for record id generation."""

import re

from membership_service.utils.id_generator import (
    EVENT_PREFIX,
    PLAN_PREFIX,
    SUBSCRIPTION_PREFIX,
    generate_id,
)


class TestGenerateId:
    def test_format(self):
        record_id = generate_id(SUBSCRIPTION_PREFIX)
        assert re.fullmatch(r"sub_[a-f0-9]{16}", record_id)

    def test_prefix_names_record_kind(self):
        assert generate_id(EVENT_PREFIX).startswith("evt_")
        assert generate_id(PLAN_PREFIX).startswith("plan_")

    def test_unique(self):
        ids = {generate_id(PLAN_PREFIX) for _ in range(1000)}
        assert len(ids) == 1000

"""Tests for the command line entry point (non-interactive commands)."""

import pytest

from core.infrastructure.state_store import JsonFileStateStore
from pipelines.studio_assistant.cli import main, parse_args
from pipelines.studio_assistant.config import BUSINESSES_KEY, USERS_KEY
from fixtures.sample_studio import sample_business_data


@pytest.fixture
def state_file(tmp_path):
    return str(tmp_path / "state.json")


def signup_args(state_file, **overrides):
    values = {
        "--business-name": "Iron Temple",
        "--category": "Fitness",
        "--address": "9 Gym Ave",
        "--zipcode": "10002",
        "--email": "owner@example.com",
        "--password": "lift-heavy",
    }
    values.update(overrides)
    argv = ["--state-file", state_file, "signup-owner"]
    for flag, value in values.items():
        argv += [flag, value]
    return argv


class TestParseArgs:

    def test_chat_defaults(self):
        args = parse_args(["chat", "-b", "biz_1"])
        assert args.command == "chat"
        assert args.role == "user"
        assert args.email is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_unknown_category_rejected(self, state_file):
        with pytest.raises(SystemExit):
            parse_args(signup_args(state_file, **{"--category": "Pilates"}))


class TestMain:

    def test_businesses_on_empty_state(self, state_file):
        assert main(["--state-file", state_file, "businesses"]) == 0

    def test_signup_owner_persists_account_and_business(self, state_file):
        assert main(signup_args(state_file)) == 0

        store = JsonFileStateStore(state_file)
        assert [u["email"] for u in store.get(USERS_KEY)] == ["owner@example.com"]
        assert [b["name"] for b in store.get(BUSINESSES_KEY)] == ["Iron Temple"]
        assert main(["--state-file", state_file, "businesses", "-z", "10002"]) == 0

    def test_duplicate_signup_fails(self, state_file):
        main(signup_args(state_file))
        assert main(signup_args(state_file)) == 1

    def test_slots_for_stored_business(self, state_file):
        JsonFileStateStore(state_file).set(BUSINESSES_KEY, [sample_business_data()])
        assert main(["--state-file", state_file, "slots", "-b", "biz_yoga_1", "--days", "7"]) == 0

    def test_slots_for_unknown_business(self, state_file):
        assert main(["--state-file", state_file, "slots", "-b", "missing"]) == 1

    def test_cancel(self, state_file):
        data = sample_business_data()
        data["appointments"] = [{
            "id": "appt_1",
            "service_id": "svc_vinyasa",
            "service_name": "Vinyasa Flow",
            "customer": {"name": "Jane Doe", "email": "jane@example.com"},
            "start_time": "2025-09-12T13:30:00Z",
            "end_time": "2025-09-12T14:30:00Z",
            "status": "confirmed",
        }]
        JsonFileStateStore(state_file).set(BUSINESSES_KEY, [data])

        assert main(["--state-file", state_file, "cancel", "appt_1"]) == 0
        stored = JsonFileStateStore(state_file).get(BUSINESSES_KEY)
        assert stored[0]["appointments"][0]["status"] == "cancelled"
        assert main(["--state-file", state_file, "cancel", "appt_missing"]) == 1

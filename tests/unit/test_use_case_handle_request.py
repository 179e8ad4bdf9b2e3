"""Unit tests for the reprocessing request surface."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from reprocessor import __version__
from reprocessor.application.dto.reprocess import ReprocessJob, ReprocessResult
from reprocessor.application.use_cases.handle_reprocess_request import (
    authorize_reprocess,
    error_response,
    handle_reprocess_request,
    parse_request,
    service_info,
)
from reprocessor.domain.errors import (
    CycleDetected,
    DepthExceeded,
    DownstreamUnavailable,
    EntityNotFound,
    InternalError,
    PermissionDenied,
    ValidationError,
)
from reprocessor.domain.models.permissions import CollectionInfo, PermissionResult
from reprocessor.domain.types import ROOT_SENTINEL

TARGET = "01K8TARGET".ljust(26, "0")
EXPLICIT_STOP = "01K8STP".ljust(26, "0")
COLLECTION_ROOT = "01K8ANCHR".ljust(26, "0")


class MockPermissionChecker:
    """Permission checker returning a fixed answer and recording calls."""

    def __init__(self, result: PermissionResult | Exception):
        self.result = result
        self.calls: list[tuple[str, str | None]] = []

    def check(self, entity_id: str, actor: str | None = None) -> PermissionResult:
        self.calls.append((entity_id, actor))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _ok_job(job: ReprocessJob) -> ReprocessResult:
    return ReprocessResult(
        batch_id="reprocess_X",
        entities_queued=1,
        entity_pis=[job.pi],
        status_url="https://orchestrator.example.org/status/reprocess_X",
    )


def _free_entity() -> MockPermissionChecker:
    return MockPermissionChecker(PermissionResult(can_edit=True))


def _in_collection(can_edit: bool = True, title: str | None = "Letters") -> MockPermissionChecker:
    return MockPermissionChecker(
        PermissionResult(
            can_edit=can_edit,
            collection=CollectionInfo(root_id=COLLECTION_ROOT, role="editor", title=title),
        )
    )


class TestParseRequest:
    """Tests for request validation messages."""

    def test_valid_request(self):
        request = parse_request(
            {
                "pi": TARGET,
                "phases": ["pinax", "description"],
                "cascade": True,
                "options": {"stop_at_pi": EXPLICIT_STOP, "custom_prompts": {"general": "x"}, "custom_note": "n"},
            }
        )
        assert request.pi == TARGET
        assert request.phases == ["pinax", "description"]
        assert request.cascade is True
        assert request.options.stop_at_pi == EXPLICIT_STOP
        assert request.options.custom_prompts == {"general": "x"}
        assert request.options.custom_note == "n"

    def test_defaults(self):
        request = parse_request({"pi": TARGET, "phases": ["pinax"]})
        assert request.cascade is False
        assert request.options.stop_at_pi is None
        assert request.options.custom_prompts is None

    @pytest.mark.parametrize(
        "payload,message",
        [
            ([], "Invalid JSON in request body"),
            ("not an object", "Invalid JSON in request body"),
            ({}, "Missing required field: pi"),
            ({"pi": "", "phases": ["pinax"]}, "Missing required field: pi"),
            ({"pi": "not-a-ulid", "phases": ["pinax"]}, "Invalid PI format (must be 26-character ULID)"),
            ({"pi": TARGET.lower(), "phases": ["pinax"]}, "Invalid PI format (must be 26-character ULID)"),
            ({"pi": TARGET}, "Missing or invalid field: phases (must be non-empty array)"),
            ({"pi": TARGET, "phases": "pinax"}, "Missing or invalid field: phases (must be non-empty array)"),
            ({"pi": TARGET, "phases": []}, "Missing or invalid field: phases (must be non-empty array)"),
            (
                {"pi": TARGET, "phases": ["pinax", "ocr"]},
                "Invalid phases: ocr. Valid phases: pinax, cheimarros, description",
            ),
            (
                {"pi": TARGET, "phases": ["pinax"], "options": {"stop_at_pi": "short"}},
                "Invalid stop_at_pi format (must be 26-character ULID)",
            ),
            (
                {"pi": TARGET, "phases": ["pinax"], "options": {"custom_prompts": {"bogus": "x"}}},
                "Invalid custom_prompts keys: bogus. "
                "Valid keys: general, reorganization, pinax, description, cheimarros",
            ),
        ],
    )
    def test_invalid_requests(self, payload, message):
        with pytest.raises(ValidationError) as exc_info:
            parse_request(payload)
        assert exc_info.value.message == message

    def test_sentinel_stop_at_pi_accepted(self):
        request = parse_request({"pi": TARGET, "phases": ["pinax"], "options": {"stop_at_pi": ROOT_SENTINEL}})
        assert request.options.stop_at_pi == ROOT_SENTINEL

    def test_empty_stop_at_pi_means_not_given(self):
        request = parse_request({"pi": TARGET, "phases": ["pinax"], "options": {"stop_at_pi": ""}})
        assert request.options.stop_at_pi is None

    def test_non_boolean_cascade_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_request({"pi": TARGET, "phases": ["pinax"], "cascade": "yes"})
        assert exc_info.value.field == "cascade"


class TestAuthorize:
    """Tests for authorize_reprocess."""

    def test_allowed(self):
        checker = _in_collection()
        permission = authorize_reprocess(checker, TARGET, "user_1")
        assert permission.collection.root_id == COLLECTION_ROOT
        assert checker.calls == [(TARGET, "user_1")]

    def test_denied_names_collection(self):
        with pytest.raises(PermissionDenied) as exc_info:
            authorize_reprocess(_in_collection(can_edit=False), TARGET, "user_1")
        assert exc_info.value.reason == 'Not authorized to reprocess entities in collection "Letters"'
        assert exc_info.value.actor == "user_1"

    def test_denied_without_title(self):
        with pytest.raises(PermissionDenied) as exc_info:
            authorize_reprocess(_in_collection(can_edit=False, title=None), TARGET, None)
        assert exc_info.value.reason == "Not authorized to reprocess this entity"

    def test_denied_names_collection_without_root(self):
        checker = MockPermissionChecker(
            PermissionResult.from_dict({"canEdit": False, "collection": {"title": "Letters"}})
        )
        with pytest.raises(PermissionDenied) as exc_info:
            authorize_reprocess(checker, TARGET, "user_1")
        assert exc_info.value.reason == 'Not authorized to reprocess entities in collection "Letters"'


class TestErrorResponse:
    """Tests for the error-to-status mapping."""

    @pytest.mark.parametrize(
        "error,status,code",
        [
            (ValidationError("bad"), 400, "VALIDATION_ERROR"),
            (PermissionDenied(TARGET, None, "no"), 403, "FORBIDDEN"),
            (EntityNotFound(TARGET), 404, "NOT_FOUND"),
            (DepthExceeded(TARGET, 100), 422, "DEPTH_EXCEEDED"),
            (CycleDetected(TARGET, TARGET, 100), 422, "DEPTH_EXCEEDED"),
            (DownstreamUnavailable("queue", "down"), 503, "DOWNSTREAM_UNAVAILABLE"),
            (InternalError("mismatch"), 500, "INTERNAL_ERROR"),
            (RuntimeError("unexpected"), 500, "INTERNAL_ERROR"),
        ],
    )
    def test_mapping(self, error, status, code):
        assert error_response(error) == (status, {"error": code, "message": str(error)})

    def test_empty_message_gets_default(self):
        assert error_response(RuntimeError())[1]["message"] == "An internal error occurred"


class TestHandleReprocessRequest:
    """Tests for handle_reprocess_request end to end."""

    def test_success(self):
        checker = _free_entity()
        status, body = handle_reprocess_request({"pi": TARGET, "phases": ["pinax"]}, "user_1", checker, _ok_job)

        assert status == 200
        assert body == {
            "batch_id": "reprocess_X",
            "entities_queued": 1,
            "entity_pis": [TARGET],
            "status_url": "https://orchestrator.example.org/status/reprocess_X",
        }

    def test_explicit_stop_wins_over_collection_root(self):
        run_job = Mock(side_effect=_ok_job)
        payload = {"pi": TARGET, "phases": ["pinax"], "cascade": True, "options": {"stop_at_pi": EXPLICIT_STOP}}

        handle_reprocess_request(payload, None, _in_collection(), run_job)

        assert run_job.call_args.args[0].stop_at_pi == EXPLICIT_STOP

    def test_collection_root_bounds_cascade(self):
        run_job = Mock(side_effect=_ok_job)

        handle_reprocess_request({"pi": TARGET, "phases": ["pinax"], "cascade": True}, None, _in_collection(), run_job)

        job = run_job.call_args.args[0]
        assert job.stop_at_pi == COLLECTION_ROOT
        assert job.cascade is True

    def test_free_entity_cascades_to_sentinel(self):
        run_job = Mock(side_effect=_ok_job)

        handle_reprocess_request({"pi": TARGET, "phases": ["pinax"], "cascade": True}, None, _free_entity(), run_job)

        assert run_job.call_args.args[0].stop_at_pi == ROOT_SENTINEL

    def test_empty_explicit_stop_falls_back_to_collection_root(self):
        run_job = Mock(side_effect=_ok_job)
        payload = {"pi": TARGET, "phases": ["pinax"], "cascade": True, "options": {"stop_at_pi": ""}}

        status, _ = handle_reprocess_request(payload, None, _in_collection(), run_job)

        assert status == 200
        assert run_job.call_args.args[0].stop_at_pi == COLLECTION_ROOT

    def test_options_passed_to_job(self):
        run_job = Mock(side_effect=_ok_job)
        payload = {
            "pi": TARGET,
            "phases": ["description"],
            "options": {"custom_prompts": {"description": "short"}, "custom_note": "again"},
        }

        handle_reprocess_request(payload, None, _free_entity(), run_job)

        job = run_job.call_args.args[0]
        assert job.custom_prompts == {"description": "short"}
        assert job.custom_note == "again"

    def test_validation_error_skips_permission_check(self):
        checker = _free_entity()
        run_job = Mock()

        status, body = handle_reprocess_request({"pi": "bad"}, None, checker, run_job)

        assert status == 400
        assert body["error"] == "VALIDATION_ERROR"
        assert checker.calls == []
        run_job.assert_not_called()

    def test_forbidden(self):
        run_job = Mock()

        status, body = handle_reprocess_request(
            {"pi": TARGET, "phases": ["pinax"]}, "user_2", _in_collection(can_edit=False), run_job
        )

        assert status == 403
        assert body["error"] == "FORBIDDEN"
        run_job.assert_not_called()

    def test_permission_service_down(self):
        checker = MockPermissionChecker(DownstreamUnavailable("permissions", "timeout"))

        status, body = handle_reprocess_request({"pi": TARGET, "phases": ["pinax"]}, None, checker, Mock())

        assert status == 503
        assert body["error"] == "DOWNSTREAM_UNAVAILABLE"

    @pytest.mark.parametrize(
        "error,status",
        [
            (EntityNotFound(TARGET), 404),
            (DepthExceeded(TARGET, 100), 422),
            (DownstreamUnavailable("staging", "down"), 503),
            (KeyError("boom"), 500),
        ],
    )
    def test_pipeline_errors(self, error, status):
        run_job = Mock(side_effect=error)

        result_status, body = handle_reprocess_request({"pi": TARGET, "phases": ["pinax"]}, None, _free_entity(), run_job)

        assert result_status == status
        assert set(body) == {"error", "message"}


def test_service_info():
    assert service_info() == {"service": "reprocessor-api", "version": __version__, "status": "ok"}

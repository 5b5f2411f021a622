import uuid

import pytest

from app.errors import ForbiddenError, NotFoundError, ValidationError
from app.validators import ensure_found, ensure_owner, paginate, parse_id, require_text


class TestParseId:
    def test_accepts_uuid_string(self):
        value = "11111111-1111-4111-8111-111111111111"
        assert parse_id(value) == uuid.UUID(value)

    def test_passes_uuid_through(self):
        value = uuid.uuid4()
        assert parse_id(value) is value

    @pytest.mark.parametrize("value", ["", "abc", "123", None, "11111111-1111-4111-8111"])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_id(value, "video id")
        assert exc_info.value.message == "Invalid video id"
        assert exc_info.value.status_code == 400


class TestRequireText:
    def test_accepts_non_blank(self):
        require_text("title", "description")

    @pytest.mark.parametrize("values", [("",), ("   ",), (None,), ("ok", "")])
    def test_rejects_missing_or_blank(self, values):
        with pytest.raises(ValidationError):
            require_text(*values, message="Content is required")


class TestOwnership:
    def test_owner_passes_by_value(self):
        owner = uuid.uuid4()
        ensure_owner({"owner_id": owner}, uuid.UUID(str(owner)), "nope")

    def test_non_owner_is_forbidden(self):
        with pytest.raises(ForbiddenError) as exc_info:
            ensure_owner({"owner_id": uuid.uuid4()}, uuid.uuid4(), "Only the owner can edit")
        assert exc_info.value.status_code == 403

    def test_anonymous_is_forbidden(self):
        with pytest.raises(ForbiddenError):
            ensure_owner({"owner_id": uuid.uuid4()}, None, "Only the owner can edit")

    def test_missing_row_is_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            ensure_found(None, "Tweet")
        assert exc_info.value.message == "Tweet not found"
        assert exc_info.value.status_code == 404


class TestPaginate:
    def test_defaults(self):
        assert paginate() == (10, 0)

    def test_offset_from_page(self):
        assert paginate(page=3, limit=20) == (20, 40)

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 1000)])
    def test_rejects_out_of_range(self, page, limit):
        with pytest.raises(ValidationError):
            paginate(page, limit)

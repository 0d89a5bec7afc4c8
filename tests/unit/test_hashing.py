"""
Unit tests for hashing utilities.
"""

from apimap.utils.hashing import ROUTE_ID_LENGTH, compute_content_hash, compute_route_id


class TestComputeContentHash:
    """Tests for compute_content_hash function."""

    def test_known_hash(self):
        """Test SHA-256 of a known string."""
        assert compute_content_hash("Hello, World!") == (
            "dffd6021bb2bd5b0af676290809ec3a53191dd81c7f70a4b28688a362182986f"
        )

    def test_str_and_bytes_agree(self):
        """Test str input is hashed as UTF-8."""
        assert compute_content_hash("route") == compute_content_hash(b"route")


class TestComputeRouteId:
    """Tests for deterministic route identifiers."""

    def _id(self, **overrides):
        params = dict(
            kind="endpoint", file="Controllers/UsersController.cs", line=10,
            http_method="GET", path="/api/users", controller="UsersController", action="List"
        )
        params.update(overrides)
        return compute_route_id(**params)

    def test_deterministic(self):
        """Test identical inputs give identical ids."""
        assert self._id() == self._id()
        assert len(self._id()) == ROUTE_ID_LENGTH

    def test_sensitive_to_each_field(self):
        """Test changing any component changes the id."""
        base = self._id()
        variants = [
            self._id(line=11),
            self._id(http_method="POST"),
            self._id(path="/api/users/{id}"),
            self._id(file="Other.cs"),
            self._id(action="Index"),
        ]
        assert all(v != base for v in variants)

    def test_ordinal_disambiguates(self):
        """Test the ordinal yields a distinct id."""
        assert self._id(ordinal=1) != self._id()
        assert self._id(ordinal=0) == self._id()

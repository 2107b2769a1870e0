"""Tests for content hashing."""

import asyncio
import hashlib
import os

import httpx
import pytest

from conftest import write_tree
from pyfstree.exceptions import TreeNetworkError, TreeNotFoundError
from pyfstree.tree import ContentHasher, ExclusionFilter, TreeWalker, WalkOptions


def _expected_tree_digest(entries, algorithm="sha512"):
    """Reference computation: join sorted per-entry digests and hash them."""
    parts = []
    for path, content in sorted(entries):
        data = content if content is not None else path.encode("utf-8")
        parts.append(hashlib.new(algorithm, data).hexdigest())
    return hashlib.new(algorithm, "".join(parts).encode("utf-8")).hexdigest()


class TestHashString:
    """Tests for ContentHasher.hash_string."""

    def test_default_algorithm_is_sha512(self):
        """Test strings are digested with SHA-512 by default."""
        expected = hashlib.sha512(b"hello").hexdigest()
        assert ContentHasher().hash_string("hello") == expected

    def test_other_algorithm(self):
        """Test another hashlib algorithm can be chosen."""
        expected = hashlib.sha256(b"hello").hexdigest()
        assert ContentHasher("sha256").hash_string("hello") == expected

    def test_bytes_input(self):
        """Test bytes are digested as-is."""
        assert ContentHasher().hash_string(b"abc") == hashlib.sha512(b"abc").hexdigest()

    def test_unknown_algorithm(self):
        """Test an unknown algorithm is rejected at construction."""
        with pytest.raises(ValueError):
            ContentHasher("not-an-algorithm")


class TestHashTree:
    """Tests for ContentHasher.hash_tree and hash_list."""

    def test_single_file_matches_reference(self, temp_dir):
        """Test a file root hashes as the digest of its single digest."""
        path = temp_dir / "a.txt"
        path.write_bytes(b"content")

        digest = asyncio.run(ContentHasher().hash_tree(str(path)))

        assert digest == _expected_tree_digest([(str(path), b"content")])

    def test_tree_matches_reference(self, temp_dir):
        """Test directories hash their path and files hash their bytes."""
        root = write_tree(temp_dir / "r", {"a.txt": "A", "sub/b.txt": "B"})
        entries = [
            (str(root), None),
            (str(root / "a.txt"), b"A"),
            (str(root / "sub"), None),
            (str(root / "sub" / "b.txt"), b"B"),
        ]

        digest = asyncio.run(ContentHasher().hash_tree(str(root)))

        assert digest == _expected_tree_digest(entries)

    def test_idempotent(self, sample_tree):
        """Test hashing an unchanged tree twice gives the same digest."""
        hasher = ContentHasher()
        first = asyncio.run(hasher.hash_tree(str(sample_tree)))
        second = asyncio.run(hasher.hash_tree(str(sample_tree)))
        assert first == second

    @pytest.mark.parametrize("batch_size", [1, 2, 3, 1000])
    def test_batch_size_does_not_change_digest(self, sample_tree, batch_size):
        """Test the digest is independent of the batch size."""
        unbatched = asyncio.run(ContentHasher().hash_tree(str(sample_tree)))
        batched = asyncio.run(
            ContentHasher(batch_size=batch_size).hash_tree(str(sample_tree))
        )
        assert batched == unbatched

    def test_content_change_changes_digest(self, sample_tree):
        """Test modifying a file changes the digest."""
        hasher = ContentHasher()
        before = asyncio.run(hasher.hash_tree(str(sample_tree)))
        (sample_tree / "README.md").write_text("# changed\n")
        after = asyncio.run(hasher.hash_tree(str(sample_tree)))
        assert before != after

    def test_exclusions(self, sample_tree):
        """Test excluded entries do not contribute to the digest."""
        hasher = ContentHasher()
        excluded = asyncio.run(
            hasher.hash_tree(str(sample_tree), ExclusionFilter(["node_modules"]))
        )
        (sample_tree / "node_modules" / "x.txt").write_text("changed\n")
        again = asyncio.run(
            hasher.hash_tree(str(sample_tree), ExclusionFilter(["node_modules"]))
        )
        assert excluded == again

    def test_accepts_walked_tree(self, sample_tree):
        """Test a previously walked Tree can be hashed directly."""
        tree = asyncio.run(
            TreeWalker(WalkOptions(symbolic=True)).walk(str(sample_tree))
        )
        hasher = ContentHasher()
        assert asyncio.run(hasher.hash_tree(tree)) == asyncio.run(
            hasher.hash_tree(str(sample_tree))
        )

    def test_links_hash_by_path(self, temp_dir):
        """Test a link contributes its own path, not its target's content."""
        root = write_tree(temp_dir / "r", {"f.txt": "x"})
        os.symlink(root / "f.txt", root / "link")

        listing = asyncio.run(ContentHasher().hash_list(str(root)))

        link_path = str(root / "link")
        assert listing[link_path] == hashlib.sha512(link_path.encode()).hexdigest()

    def test_linked_root_hashes_its_target(self, temp_dir):
        """Test a root that links to a directory hashes the entries behind it."""
        write_tree(temp_dir / "r", {"f.txt": "x"})
        os.symlink(temp_dir / "r", temp_dir / "alias")

        listing = asyncio.run(ContentHasher().hash_list(str(temp_dir / "alias")))

        alias = str(temp_dir / "alias")
        assert list(listing) == [alias, os.path.join(alias, "f.txt")]
        assert listing[os.path.join(alias, "f.txt")] == hashlib.sha512(b"x").hexdigest()

    def test_missing_root(self, temp_dir):
        """Test a missing root raises unless missing_ok is set."""
        hasher = ContentHasher()
        with pytest.raises(TreeNotFoundError):
            asyncio.run(hasher.hash_tree(str(temp_dir / "missing")))

        digest = asyncio.run(
            hasher.hash_tree(str(temp_dir / "missing"), missing_ok=True)
        )
        assert digest == hashlib.sha512(b"").hexdigest()

    def test_hash_list_is_ordered_by_path(self, sample_tree):
        """Test per-entry digests come back in path order."""
        listing = asyncio.run(ContentHasher().hash_list(str(sample_tree)))

        assert list(listing) == sorted(listing)
        readme = str(sample_tree / "README.md")
        assert listing[readme] == hashlib.sha512(b"# project\n").hexdigest()

    def test_progress_callback_per_batch(self, sample_tree):
        """Test the progress callback fires once per batch."""
        calls = []
        hasher = ContentHasher(
            batch_size=4,
            progress_callback=lambda done, total: calls.append((done, total)),
        )

        asyncio.run(hasher.hash_tree(str(sample_tree)))

        assert calls == [(4, 10), (8, 10), (10, 10)]


class TestResolveBatchSize:
    """Tests for ContentHasher.resolve_batch_size."""

    def test_explicit_batch_size(self):
        """Test an explicit batch size wins."""
        assert ContentHasher(batch_size=7).resolve_batch_size(100) == 7

    def test_unlimited_descriptors(self, monkeypatch):
        """Test an unlimited descriptor limit hashes everything at once."""
        monkeypatch.setattr("pyfstree.tree.hasher.descriptor_limit", lambda: None)
        assert ContentHasher().resolve_batch_size(42) == 42

    def test_from_descriptor_limit(self, monkeypatch):
        """Test the batch size is a fifth of the descriptor limit."""
        monkeypatch.setattr("pyfstree.tree.hasher.descriptor_limit", lambda: 1024)
        assert ContentHasher().resolve_batch_size(5000) == 205


class TestHashUrl:
    """Tests for ContentHasher.hash_url."""

    def test_hashes_response_body(self):
        """Test a URL hashes to the digest of its body."""
        body = b"console.log('hi');\n" * 1000
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, content=body)
        )

        digest = asyncio.run(
            ContentHasher().hash_url("https://example.com/app.js", transport=transport)
        )

        assert digest == hashlib.sha512(body).hexdigest()

    def test_error_status(self):
        """Test an error status raises TreeNetworkError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(404))

        with pytest.raises(TreeNetworkError, match="404"):
            asyncio.run(
                ContentHasher().hash_url(
                    "https://example.com/gone", transport=transport
                )
            )

    def test_connection_error(self):
        """Test transport failures raise TreeNetworkError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = httpx.MockTransport(handler)

        with pytest.raises(TreeNetworkError):
            asyncio.run(
                ContentHasher().hash_url("https://example.com/", transport=transport)
            )

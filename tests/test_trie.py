"""Tests for the dotted-name trie."""

from javadeps.trie import NameTrie, PackageTrieSet


class TestPackageTrieSet:
    def test_longest_known_prefix(self):
        packages = PackageTrieSet(["com.acme", "com.acme.util"])
        assert packages.find_package("com.acme.util.Strings.Inner") == "com.acme.util"
        assert packages.find_package("com.acme.Widget") == "com.acme"

    def test_unknown_name_has_no_package(self):
        packages = PackageTrieSet(["com.acme"])
        assert packages.find_package("org.example.Thing") == ""
        # "com" alone was never recorded
        assert packages.find_package("com.Thing") == ""

    def test_membership_is_exact(self):
        packages = PackageTrieSet(["com.acme.util"])
        assert "com.acme.util" in packages
        assert "com.acme" not in packages

    def test_default_package_is_ignored(self):
        packages = PackageTrieSet()
        packages.add("")
        packages.add("com.acme")
        packages.add("com.acme")
        assert len(packages) == 1


class TestNameTrie:
    def test_get_returns_deepest_value(self):
        trie = NameTrie()
        trie.put("com", 1)
        trie.put("com.acme", 2)
        assert trie.get("com.acme.Widget") == 2
        assert trie.get("com.other") == 1
        assert trie.get("org") is None

    def test_wildcard_matches_one_component(self):
        trie = NameTrie()
        trie.put("com.*.internal", "hidden")
        assert trie.get("com.acme.internal.Impl") == "hidden"
        assert trie.get("com.acme.api") is None

    def test_exact_component_wins_over_wildcard(self):
        trie = NameTrie()
        trie.put("com.*", "any")
        trie.put("com.acme", "acme")
        assert trie.get("com.acme.Widget") == "acme"
        assert trie.get("com.other.Widget") == "any"

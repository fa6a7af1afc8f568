"""Tests for the external class indexes."""

import zipfile
from pathlib import Path

import pytest

from javadeps.classpath import (
    ChainedClassIndex,
    DirectoryClassIndex,
    StaticClassIndex,
    build_class_index,
    class_file_to_binary_name,
    jar_class_index,
    jdk_class_index,
)
from javadeps.config import Settings
from javadeps.errors import ClassLookupError, ConfigError


@pytest.mark.parametrize(
    "entry, expected",
    [
        ("java/util/Map$Entry.class", "java.util.Map$Entry"),
        ("META-INF/versions/11/com/acme/Widget.class", "com.acme.Widget"),
        ("com/acme/package-info.class", None),
        ("module-info.class", None),
        ("com/acme/readme.txt", None),
    ],
)
def test_class_file_to_binary_name(entry, expected):
    assert class_file_to_binary_name(entry) == expected


class TestStaticClassIndex:
    def test_find_class_returns_package(self):
        index = StaticClassIndex(["com.acme.Widget", "com.acme.Widget$Part"])
        assert index.find_class("com.acme.Widget") == "com.acme"
        assert index.find_class("com.acme.Widget$Part") == "com.acme"
        assert index.find_class("com.acme.Gadget") is None
        assert len(index) == 2

    def test_jar(self, tmp_path):
        jar = tmp_path / "lib.jar"
        with zipfile.ZipFile(jar, "w") as zf:
            zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
            zf.writestr("org/lib/Tool.class", b"\xca\xfe\xba\xbe")
        index = jar_class_index(jar)
        assert index.find_class("org.lib.Tool") == "org.lib"
        assert len(index) == 1

    def test_unreadable_jar(self, tmp_path):
        jar = tmp_path / "broken.jar"
        jar.write_text("not a zip")
        with pytest.raises(ConfigError):
            jar_class_index(jar)


class TestDirectoryClassIndex:
    @pytest.fixture
    def classes(self, tmp_path):
        (tmp_path / "com" / "acme").mkdir(parents=True)
        (tmp_path / "com" / "acme" / "Widget.class").write_bytes(b"\xca\xfe\xba\xbe")
        return tmp_path

    def test_finds_class_files(self, classes):
        index = DirectoryClassIndex(classes)
        assert index.find_class("com.acme.Widget") == "com.acme"
        assert index.find_class("com.acme.Gadget") is None

    def test_case_mismatch_is_a_lookup_error(self, classes, monkeypatch):
        # Pretend the file system is case-insensitive.
        monkeypatch.setattr(Path, "is_file", lambda self: True)
        with pytest.raises(ClassLookupError):
            DirectoryClassIndex(classes).find_class("com.acme.widget")


class TestChainedClassIndex:
    def test_first_hit_wins_and_errors_are_skipped(self):
        class Failing:
            def find_class(self, binary_name):
                raise ClassLookupError("case mismatch")

        chain = ChainedClassIndex(
            [Failing(), StaticClassIndex(["a.b.C"]), StaticClassIndex(["a.b.C", "x.Y"])]
        )
        assert chain.find_class("a.b.C") == "a.b"
        assert chain.find_class("x.Y") == "x"
        assert chain.find_class("nope.Z") is None


class TestBuildClassIndex:
    def test_builtin_classes_without_jdk(self):
        index = build_class_index(Settings(use_jdk=False))
        assert index.find_class("java.lang.String") == "java.lang"
        assert index.find_class("java.util.Map$Entry") == "java.util"

    def test_classpath_entries(self, tmp_path, caplog):
        jar = tmp_path / "lib.jar"
        with zipfile.ZipFile(jar, "w") as zf:
            zf.writestr("org/lib/Tool.class", b"")
        settings = Settings(classpath=(jar, tmp_path / "missing"), use_jdk=False)
        with caplog.at_level("WARNING", logger="javadeps"):
            index = build_class_index(settings)
        assert index.find_class("org.lib.Tool") == "org.lib"
        assert "does not exist" in caplog.text


def test_jdk_index_needs_a_jdk(tmp_path, caplog):
    with caplog.at_level("WARNING", logger="javadeps"):
        assert jdk_class_index(tmp_path) is None
    assert "not a JDK" in caplog.text

"""Class indexes: the oracle that answers "does this external class exist?".

Source files are resolved from the analyzed corpus itself. Anything else
is looked up by binary name (``java.util.Map$Entry``) in a class index,
which reports the package of the class if it knows it. Indexes can be
built from jars, compiled class directories, or the running JDK.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from javadeps.errors import ClassLookupError, ConfigError

if TYPE_CHECKING:
    from javadeps.config import Settings

logger = logging.getLogger(__name__)

_VERSIONED_ENTRY_RE = re.compile(r"^META-INF/versions/\d+/")

_SKIP_CLASS_FILES = {"module-info.class", "package-info.class"}

# Classes known without a JDK: all of the implicitly imported java.lang
# types most code touches, plus the collection and I/O staples.
BUILTIN_CLASSES = (
    # java.lang
    "java.lang.AbstractMethodError",
    "java.lang.Appendable",
    "java.lang.ArithmeticException",
    "java.lang.ArrayIndexOutOfBoundsException",
    "java.lang.ArrayStoreException",
    "java.lang.AssertionError",
    "java.lang.AutoCloseable",
    "java.lang.Boolean",
    "java.lang.Byte",
    "java.lang.CharSequence",
    "java.lang.Character",
    "java.lang.Character$UnicodeBlock",
    "java.lang.Class",
    "java.lang.ClassCastException",
    "java.lang.ClassLoader",
    "java.lang.ClassNotFoundException",
    "java.lang.CloneNotSupportedException",
    "java.lang.Cloneable",
    "java.lang.Comparable",
    "java.lang.Deprecated",
    "java.lang.Double",
    "java.lang.Enum",
    "java.lang.Error",
    "java.lang.Exception",
    "java.lang.Float",
    "java.lang.FunctionalInterface",
    "java.lang.IllegalAccessException",
    "java.lang.IllegalArgumentException",
    "java.lang.IllegalMonitorStateException",
    "java.lang.IllegalStateException",
    "java.lang.IndexOutOfBoundsException",
    "java.lang.InheritableThreadLocal",
    "java.lang.InstantiationException",
    "java.lang.Integer",
    "java.lang.InterruptedException",
    "java.lang.Iterable",
    "java.lang.LinkageError",
    "java.lang.Long",
    "java.lang.Math",
    "java.lang.Module",
    "java.lang.NegativeArraySizeException",
    "java.lang.NoClassDefFoundError",
    "java.lang.NoSuchFieldException",
    "java.lang.NoSuchMethodException",
    "java.lang.NullPointerException",
    "java.lang.Number",
    "java.lang.NumberFormatException",
    "java.lang.Object",
    "java.lang.OutOfMemoryError",
    "java.lang.Override",
    "java.lang.Package",
    "java.lang.Process",
    "java.lang.ProcessBuilder",
    "java.lang.Readable",
    "java.lang.Record",
    "java.lang.ReflectiveOperationException",
    "java.lang.Runnable",
    "java.lang.Runtime",
    "java.lang.RuntimeException",
    "java.lang.SafeVarargs",
    "java.lang.SecurityException",
    "java.lang.Short",
    "java.lang.StackOverflowError",
    "java.lang.StackTraceElement",
    "java.lang.StrictMath",
    "java.lang.String",
    "java.lang.StringBuffer",
    "java.lang.StringBuilder",
    "java.lang.StringIndexOutOfBoundsException",
    "java.lang.SuppressWarnings",
    "java.lang.System",
    "java.lang.Thread",
    "java.lang.Thread$State",
    "java.lang.Thread$UncaughtExceptionHandler",
    "java.lang.ThreadLocal",
    "java.lang.Throwable",
    "java.lang.UnsupportedOperationException",
    "java.lang.Void",
    # java.util
    "java.util.AbstractList",
    "java.util.AbstractMap",
    "java.util.AbstractSet",
    "java.util.ArrayDeque",
    "java.util.ArrayList",
    "java.util.Arrays",
    "java.util.BitSet",
    "java.util.Collection",
    "java.util.Collections",
    "java.util.Comparator",
    "java.util.ConcurrentModificationException",
    "java.util.Deque",
    "java.util.EnumMap",
    "java.util.EnumSet",
    "java.util.HashMap",
    "java.util.HashSet",
    "java.util.IdentityHashMap",
    "java.util.Iterator",
    "java.util.LinkedHashMap",
    "java.util.LinkedHashSet",
    "java.util.LinkedList",
    "java.util.List",
    "java.util.ListIterator",
    "java.util.Locale",
    "java.util.Map",
    "java.util.Map$Entry",
    "java.util.NavigableMap",
    "java.util.NavigableSet",
    "java.util.NoSuchElementException",
    "java.util.Objects",
    "java.util.Optional",
    "java.util.PriorityQueue",
    "java.util.Properties",
    "java.util.Queue",
    "java.util.Random",
    "java.util.Set",
    "java.util.SortedMap",
    "java.util.SortedSet",
    "java.util.Spliterator",
    "java.util.TreeMap",
    "java.util.TreeSet",
    "java.util.UUID",
    "java.util.WeakHashMap",
    # java.util.function
    "java.util.function.BiConsumer",
    "java.util.function.BiFunction",
    "java.util.function.BinaryOperator",
    "java.util.function.BooleanSupplier",
    "java.util.function.Consumer",
    "java.util.function.Function",
    "java.util.function.IntFunction",
    "java.util.function.Predicate",
    "java.util.function.Supplier",
    "java.util.function.UnaryOperator",
    # java.util.concurrent
    "java.util.concurrent.Callable",
    "java.util.concurrent.CompletableFuture",
    "java.util.concurrent.ConcurrentHashMap",
    "java.util.concurrent.ConcurrentMap",
    "java.util.concurrent.CountDownLatch",
    "java.util.concurrent.ExecutionException",
    "java.util.concurrent.Executor",
    "java.util.concurrent.ExecutorService",
    "java.util.concurrent.Executors",
    "java.util.concurrent.Future",
    "java.util.concurrent.TimeUnit",
    "java.util.concurrent.TimeoutException",
    "java.util.concurrent.atomic.AtomicBoolean",
    "java.util.concurrent.atomic.AtomicInteger",
    "java.util.concurrent.atomic.AtomicLong",
    "java.util.concurrent.atomic.AtomicReference",
    "java.util.concurrent.locks.Lock",
    "java.util.concurrent.locks.ReentrantLock",
    # java.util.stream
    "java.util.stream.Collectors",
    "java.util.stream.IntStream",
    "java.util.stream.Stream",
    # java.io
    "java.io.BufferedReader",
    "java.io.BufferedWriter",
    "java.io.ByteArrayInputStream",
    "java.io.ByteArrayOutputStream",
    "java.io.Closeable",
    "java.io.File",
    "java.io.FileInputStream",
    "java.io.FileNotFoundException",
    "java.io.FileOutputStream",
    "java.io.FileReader",
    "java.io.FileWriter",
    "java.io.IOException",
    "java.io.InputStream",
    "java.io.InputStreamReader",
    "java.io.OutputStream",
    "java.io.OutputStreamWriter",
    "java.io.PrintStream",
    "java.io.PrintWriter",
    "java.io.Reader",
    "java.io.Serializable",
    "java.io.StringReader",
    "java.io.StringWriter",
    "java.io.UncheckedIOException",
    "java.io.Writer",
    # java.nio
    "java.nio.ByteBuffer",
    "java.nio.charset.Charset",
    "java.nio.charset.StandardCharsets",
    "java.nio.file.Files",
    "java.nio.file.Path",
    "java.nio.file.Paths",
)


class ClassIndex(Protocol):
    """Protocol for external class lookups."""

    def find_class(self, binary_name: str) -> str | None:
        """Return the package of *binary_name*, or None if unknown.

        May raise :class:`ClassLookupError`, which callers treat as None.
        """
        ...


class StaticClassIndex:
    """An in-memory set of binary class names."""

    def __init__(self, binary_names: Iterable[str] = ()):
        self._packages: dict[str, str] = {}
        for name in binary_names:
            self.add(name)

    def add(self, binary_name: str) -> None:
        self._packages[binary_name] = binary_name.rpartition(".")[0]

    def find_class(self, binary_name: str) -> str | None:
        return self._packages.get(binary_name)

    def __len__(self) -> int:
        return len(self._packages)

    @classmethod
    def from_class_files(cls, entries: Iterable[str]) -> StaticClassIndex:
        """Build an index from ``a/b/C$D.class`` style archive entries."""
        index = cls()
        for entry in entries:
            name = class_file_to_binary_name(entry)
            if name is not None:
                index.add(name)
        return index


class DirectoryClassIndex:
    """Looks classes up in a directory of compiled ``.class`` files."""

    def __init__(self, root: Path):
        self.root = root
        self._listings: dict[Path, set[str]] = {}

    def find_class(self, binary_name: str) -> str | None:
        parts = binary_name.split(".")
        parts[-1] += ".class"
        path = self.root.joinpath(*parts)
        if not path.is_file():
            return None
        # Case-insensitive file systems happily open Foo.class for foo.class.
        current = self.root
        for part in parts:
            if part not in self._listing(current):
                raise ClassLookupError(
                    f"{path} resolves to a file whose name differs in case from {binary_name}"
                )
            current = current / part
        return binary_name.rpartition(".")[0]

    def _listing(self, directory: Path) -> set[str]:
        listing = self._listings.get(directory)
        if listing is None:
            listing = set(os.listdir(directory))
            self._listings[directory] = listing
        return listing


class ChainedClassIndex:
    """Consults several indexes in order; the first hit wins."""

    def __init__(self, indexes: Iterable[ClassIndex]):
        self.indexes = list(indexes)

    def find_class(self, binary_name: str) -> str | None:
        for index in self.indexes:
            try:
                package = index.find_class(binary_name)
            except ClassLookupError as e:
                logger.debug("Lookup of %s failed: %s", binary_name, e)
                continue
            if package is not None:
                return package
        return None


def class_file_to_binary_name(entry: str) -> str | None:
    """Convert an archive entry such as ``java/util/Map$Entry.class``."""
    entry = entry.replace("\\", "/")
    if not entry.endswith(".class"):
        return None
    entry = _VERSIONED_ENTRY_RE.sub("", entry)
    if entry.rsplit("/", 1)[-1] in _SKIP_CLASS_FILES:
        return None
    return entry[: -len(".class")].replace("/", ".")


def jar_class_index(jar_path: Path) -> StaticClassIndex:
    """Index the classes of a jar (or any zip) file."""
    try:
        with zipfile.ZipFile(jar_path) as jar:
            return StaticClassIndex.from_class_files(jar.namelist())
    except (OSError, zipfile.BadZipFile) as e:
        raise ConfigError(f"Cannot read classpath entry {jar_path}: {e}") from e


def _find_java_home() -> Path | None:
    java_home = os.environ.get("JAVA_HOME")
    if java_home:
        return Path(java_home)
    java = shutil.which("java")
    if java:
        return Path(java).resolve().parent.parent
    return None


def jdk_class_index(java_home: Path | None = None) -> StaticClassIndex | None:
    """Index the platform classes of a JDK, or return None if none is found.

    Modern JDKs keep their classes in ``lib/modules``, listed with
    ``jimage``; older ones ship ``rt.jar``.
    """
    home = java_home or _find_java_home()
    if home is None:
        logger.warning("No JDK found (set JAVA_HOME) — JDK classes resolve from the builtin list only")
        return None

    for rt_jar in (home / "jre" / "lib" / "rt.jar", home / "lib" / "rt.jar"):
        if rt_jar.is_file():
            return jar_class_index(rt_jar)

    modules = home / "lib" / "modules"
    if not modules.is_file():
        logger.warning("%s is not a JDK (no lib/modules) — skipping JDK classes", home)
        return None

    jimage = home / "bin" / "jimage"
    jimage_path = str(jimage) if jimage.is_file() else shutil.which("jimage")
    if not jimage_path:
        logger.warning("jimage not found — skipping JDK classes")
        return None

    result = subprocess.run(
        [jimage_path, "list", str(modules)],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        logger.warning("jimage list failed: %s", result.stderr.strip())
        return None

    # Output lists "Module: java.base" headers followed by indented entries.
    entries = (line.strip() for line in result.stdout.splitlines())
    index = StaticClassIndex.from_class_files(e for e in entries if e.endswith(".class"))
    logger.debug("JDK index: %d classes from %s", len(index), modules)
    return index


def build_class_index(settings: Settings) -> ChainedClassIndex:
    """Assemble the class index described by *settings*."""
    indexes: list[ClassIndex] = [StaticClassIndex(BUILTIN_CLASSES)]
    for entry in settings.classpath:
        if entry.is_dir():
            indexes.append(DirectoryClassIndex(entry))
        elif entry.is_file():
            indexes.append(jar_class_index(entry))
        else:
            logger.warning("Classpath entry %s does not exist — skipping", entry)
    if settings.use_jdk:
        jdk = jdk_class_index()
        if jdk is not None:
            indexes.append(jdk)
    return ChainedClassIndex(indexes)

"""Tests for the definition pattern catalog."""

import re

import pytest

from hsdef.patterns import DEFINITION_PATTERNS, DefinitionKind, PatternEntry, build_patterns


def kind_regex(identifier: str, kind: DefinitionKind) -> re.Pattern:
    """Compile the catalog pattern of one kind for identifier."""
    for entry in build_patterns(identifier):
        if entry.kind is kind:
            return re.compile(entry.pattern)
    raise AssertionError(f"no pattern for {kind}")


class TestCatalog:
    """Tests for catalog shape and ordering."""

    def test_one_entry_per_kind_in_priority_order(self):
        """Every kind appears once, in enum order."""
        entries = build_patterns("foo")
        assert [e.kind for e in entries] == list(DefinitionKind)
        assert all(isinstance(e, PatternEntry) for e in entries)

    def test_signatures_come_first(self):
        """Signatures outrank everything, assignment comes right after."""
        kinds = [kind for kind, _ in DEFINITION_PATTERNS]
        assert kinds[:3] == [
            DefinitionKind.SIGNATURE_SAME_LINE,
            DefinitionKind.SIGNATURE_NEXT_LINE,
            DefinitionKind.ASSIGNMENT,
        ]

    def test_priority_follows_catalog_order(self):
        """priority is the catalog position."""
        assert DefinitionKind.SIGNATURE_SAME_LINE.priority == 0
        assert DefinitionKind.PATTERN_SYNONYM.priority == len(DefinitionKind) - 1
        assert DefinitionKind.ASSIGNMENT.priority < DefinitionKind.DATA_DECL.priority

    def test_is_signature(self):
        """Only the two signature kinds count as signatures."""
        signatures = {k for k in DefinitionKind if k.is_signature}
        assert signatures == {DefinitionKind.SIGNATURE_SAME_LINE, DefinitionKind.SIGNATURE_NEXT_LINE}

    def test_patterns_are_multiline_mode(self):
        """Each pattern carries the (?m) flag so ^ anchors at line starts."""
        assert all(e.pattern.startswith("(?m)") for e in build_patterns("foo"))

    @pytest.mark.parametrize("identifier", ["foo", "Foo'", "<$>", "Map.lookup", "a+b", "(.)"])
    def test_all_patterns_compile(self, identifier):
        """Patterns compile for plain names and for operators."""
        for entry in build_patterns(identifier):
            re.compile(entry.pattern)


class TestEscaping:
    """Tests for identifier escaping."""

    def test_operator_matched_literally(self):
        """Regex metacharacters in the identifier are literal."""
        regex = kind_regex("<$>", DefinitionKind.SIGNATURE_SAME_LINE)
        assert regex.search("<$> :: Functor f => (a -> b) -> f a -> f b")
        assert not regex.search("<x> :: Int")

    def test_dot_is_literal(self):
        """A dot only matches a dot."""
        regex = kind_regex("Map.lookup", DefinitionKind.SIGNATURE_SAME_LINE)
        assert regex.search("Map.lookup :: k -> Map k v -> Maybe v")
        assert not regex.search("MapXlookup :: Int")


class TestSingleLineKinds:
    """Tests for what each kind does and does not accept."""

    def test_signature_same_line(self):
        regex = kind_regex("foo", DefinitionKind.SIGNATURE_SAME_LINE)
        assert regex.search("foo :: Int")
        assert regex.search("foo::Int")
        assert not regex.search("  foo :: Int")
        assert not regex.search("foobar :: Int")

    def test_signature_next_line(self):
        regex = kind_regex("foo", DefinitionKind.SIGNATURE_NEXT_LINE)
        assert regex.search("foo\n  :: Int")
        assert regex.search("foo\r\n  :: Int")
        assert not regex.search("foo\n\n  :: Int")

    def test_assignment_excludes_equality(self):
        """`foo == x` is a comparison, not a binding."""
        regex = kind_regex("foo", DefinitionKind.ASSIGNMENT)
        assert regex.search("foo = 1")
        assert regex.search("foo =")
        assert not regex.search("foo == 1")
        assert not regex.search("foo x = 1")

    def test_data_decl_respects_word_end(self):
        """`Foo` does not match `Foo'` or `FooBar`."""
        regex = kind_regex("Foo", DefinitionKind.DATA_DECL)
        assert regex.search("data Foo = Foo")
        assert regex.search("data Foo")
        assert not regex.search("data Foo' = Foo'")
        assert not regex.search("data FooBar = FooBar")

    def test_class_with_context(self):
        """A superclass context before the class name is skipped."""
        regex = kind_regex("Monad", DefinitionKind.CLASS_DECL)
        assert regex.search("class Monad m where")
        assert regex.search("class Applicative m => Monad m where")
        assert not regex.search("class MonadFail m where")

    def test_type_family_not_plain_type(self):
        """`type family X` is a family, not a type synonym named family."""
        assert kind_regex("F", DefinitionKind.TYPE_FAMILY).search("type family F a :: *")
        assert not kind_regex("F", DefinitionKind.TYPE_DECL).search("type family F a :: *")

    def test_pattern_synonym_needs_signature(self):
        regex = kind_regex("P", DefinitionKind.PATTERN_SYNONYM)
        assert regex.search("pattern P :: Int -> T")
        assert not regex.search("pattern P x = T x")


class TestConstructor:
    """Tests for the multi-line constructor pattern."""

    def test_constructor_after_equals(self):
        regex = kind_regex("Con", DefinitionKind.CONSTRUCTOR)
        assert regex.search("data T = Con Int")

    def test_constructor_after_bar(self):
        regex = kind_regex("B", DefinitionKind.CONSTRUCTOR)
        assert regex.search("data T = A | B | C")

    def test_constructor_on_continuation_line(self):
        regex = kind_regex("B", DefinitionKind.CONSTRUCTOR)
        assert regex.search("data T =\n    A Int\n  | B String")

    def test_constructor_on_line_after_equals(self):
        regex = kind_regex("A", DefinitionKind.CONSTRUCTOR)
        assert regex.search("data T =\n  A Int")

    def test_declaration_ends_at_column_zero(self):
        """A constructor-looking name after the declaration ends is not matched."""
        regex = kind_regex("B", DefinitionKind.CONSTRUCTOR)
        assert not regex.search("data T = A\n\nfoo = B")
        assert not regex.search("data T = A\nx | B")

    def test_type_name_is_not_constructor(self):
        regex = kind_regex("T", DefinitionKind.CONSTRUCTOR)
        assert not regex.search("data T = A")

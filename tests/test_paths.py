"""
Tests for path expansion, resolution and containment.
"""

from pathlib import Path

import pytest

from kog_shell.filesystem import (
    InvalidArgumentError,
    PathResolver,
    ResolutionMode,
    SandboxViolationError,
    expand_path,
    is_within_directory,
    resolve_path,
)

HOME = "/home/u"
ENV = {"HOME": "/home/u", "PROJECT": "demo", "EMPTY": "", "NESTED": "$PROJECT"}


class TestExpandPath:
    """Test expand_path."""

    def test_blank_input_unchanged(self):
        """Test that empty and whitespace-only input is returned as-is."""
        assert expand_path("", HOME, ENV) == ""
        assert expand_path("   ", HOME, ENV) == "   "
        assert expand_path(None, HOME, ENV) is None

    def test_tilde_alone(self):
        """Test that a lone tilde becomes the home directory."""
        assert expand_path("~", HOME, ENV) == "/home/u"

    def test_tilde_slash_prefix(self):
        """Test that ~/ is replaced by the home directory."""
        assert expand_path("~/notes/a.txt", HOME, ENV) == "/home/u/notes/a.txt"

    def test_tilde_user_and_inner_tilde_untouched(self):
        """Test that only a leading ~ or ~/ is expanded."""
        assert expand_path("~other/x", HOME, ENV) == "~other/x"
        assert expand_path("a/~/b", HOME, ENV) == "a/~/b"

    def test_brace_variable(self):
        """Test ${NAME} substitution."""
        assert expand_path("/srv/${PROJECT}/data", HOME, ENV) == "/srv/demo/data"

    def test_brace_variable_followed_by_identifier_chars(self):
        """Test that ${FOO}BAR is FOO followed by literal BAR."""
        assert expand_path("${PROJECT}BAR", HOME, ENV) == "demoBAR"

    def test_bare_variable_is_greedy(self):
        """Test that $NAME takes the longest identifier."""
        assert expand_path("$PROJECTBAR", HOME, ENV) == ""
        assert expand_path("$PROJECT/x", HOME, ENV) == "demo/x"

    def test_unknown_variables_become_empty(self):
        """Test that missing variables expand to an empty string."""
        assert expand_path("/a/$MISSING/b", HOME, ENV) == "/a//b"
        assert expand_path("/a/${MISSING}/b", HOME, ENV) == "/a//b"

    def test_dollar_without_identifier_is_literal(self):
        """Test that $ not followed by an identifier is left untouched."""
        assert expand_path("price$", HOME, ENV) == "price$"
        assert expand_path("a$-b", HOME, ENV) == "a$-b"
        assert expand_path("$1abc", HOME, ENV) == "$1abc"
        assert expand_path("${1abc}", HOME, ENV) == "${1abc}"

    def test_substituted_text_not_reexpanded_within_pass(self):
        """Test that a bare substitution is not expanded a second time."""
        assert expand_path("$NESTED", HOME, ENV) == "$PROJECT"

    def test_brace_result_expanded_by_bare_pass(self):
        assert expand_path("${NESTED}", HOME, ENV) == "demo"

    def test_tilde_and_variables_combined(self):
        """Test that ~ and variables expand together."""
        assert expand_path("~/$PROJECT/${PROJECT}", HOME, ENV) == "/home/u/demo/demo"


class TestResolvePath:
    """Test resolve_path."""

    def test_relative_resolves_under_base(self):
        """Test that relative input is joined to the base and normalized."""
        assert resolve_path("a/./b/../c", "/work", home=HOME, env=ENV) == Path("/work/a/c")

    def test_absolute_ignores_base(self):
        """Test that absolute input is only normalized."""
        assert resolve_path("/x//y/./z/..", "/work", home=HOME, env=ENV) == Path("/x/y")

    def test_empty_resolves_to_base(self):
        """Test that an empty string resolves to the base itself."""
        assert resolve_path("", "/work", home=HOME, env=ENV) == Path("/work")

    def test_none_is_rejected(self):
        """Test that a missing path is an invalid argument."""
        with pytest.raises(InvalidArgumentError):
            resolve_path(None, "/work")

    def test_dotdot_above_root(self):
        """Test that .. beyond the root stays at the root."""
        assert resolve_path("../../..", "/work", home=HOME, env=ENV) == Path("/")

    def test_home_variable_escape(self):
        """Test that $HOME/../etc resolves to /etc."""
        assert resolve_path("$HOME/../etc", "/work", home=HOME, env=ENV) == Path("/etc")

    @pytest.mark.parametrize("raw", ["a", "a/b/c", ".", "a/../b", "./x/"])
    def test_sandboxed_accepts_descendants(self, raw):
        """Test that base and paths below it pass the sandbox."""
        resolved = resolve_path(raw, "/work", ResolutionMode.SANDBOXED, home=HOME, env=ENV)
        assert is_within_directory(resolved, "/work")

    @pytest.mark.parametrize("raw", ["..", "../outside", "/etc/passwd", "a/../../x", "~", "/work2"])
    def test_sandboxed_refuses_escapes(self, raw):
        """Test that anything outside base is refused in sandboxed mode."""
        unsandboxed = resolve_path(raw, "/work", home=HOME, env=ENV)
        assert not is_within_directory(unsandboxed, "/work")

        with pytest.raises(SandboxViolationError) as exc_info:
            resolve_path(raw, "/work", ResolutionMode.SANDBOXED, home=HOME, env=ENV)
        assert exc_info.value.path == str(unsandboxed)

    def test_refusal_message_names_action(self):
        """Test that the refusal message uses the caller's verb."""
        with pytest.raises(SandboxViolationError) as exc_info:
            resolve_path("../x", "/work", ResolutionMode.SANDBOXED, action="delete")
        assert str(exc_info.value) == "Refusing to delete outside current working directory: /x"

    def test_absolute_inside_base_is_allowed(self):
        """Test that absolute paths inside base pass the sandbox."""
        resolved = resolve_path("/work/sub/f.txt", "/work", ResolutionMode.SANDBOXED)
        assert resolved == Path("/work/sub/f.txt")


class TestIsWithinDirectory:
    """Test the lexical containment check."""

    def test_same_directory(self):
        assert is_within_directory("/work", "/work") is True

    def test_descendant(self):
        assert is_within_directory("/work/a/b", "/work") is True

    def test_sibling_with_common_prefix(self):
        """Test that the check compares components, not characters."""
        assert is_within_directory("/work2/a", "/work") is False

    def test_unnormalized_input(self):
        """Test that .. is collapsed before comparing."""
        assert is_within_directory("/work/a/../../etc", "/work") is False

    def test_root_contains_everything(self):
        assert is_within_directory("/anything/at/all", "/") is True


class TestPathResolver:
    """Test the configured resolver."""

    def test_reads_environment_on_every_call(self):
        """Test that environment changes are picked up."""
        env = {"DIR": "one"}
        resolver = PathResolver(home=HOME, env=lambda: env)
        assert resolver.resolve("$DIR", "/work") == Path("/work/one")

        env["DIR"] = "two"
        assert resolver.resolve("$DIR", "/work") == Path("/work/two")

    def test_uses_configured_home(self):
        resolver = PathResolver(home="/opt/home", env=lambda: {})
        assert resolver.expand("~/x") == "/opt/home/x"

import io
import os

import pytest

from minishell.builtins import (
    ShellExit,
    builtin_cd,
    builtin_echo,
    builtin_env,
    builtin_exit,
    builtin_pwd,
    builtin_unset,
    is_builtin,
    is_n_flag,
    parse_env_args,
    parse_exit_code,
    run_builtin,
)
from minishell.environment import Environment, ShellContext


def make_ctx(**variables):
    return ShellContext(env=Environment(variables))


def streams():
    return io.StringIO(), io.StringIO()


@pytest.mark.parametrize("name", ["echo", "pwd", "env", "cd", "export", "unset", "exit"])
def test_is_builtin_known(name):
    assert is_builtin([name, "x"]) is True


@pytest.mark.parametrize("argv", [[], ["ls"], ["Echo"], None])
def test_is_builtin_other(argv):
    assert is_builtin(argv) is False


def test_run_builtin_empty_and_unknown():
    ctx = make_ctx()
    out, err = streams()
    assert run_builtin(ctx, [], out, err) == 0
    assert run_builtin(ctx, ["ls"], out, err) == 1
    assert out.getvalue() == ""


def test_run_builtin_dispatches_echo():
    out, err = streams()
    assert run_builtin(make_ctx(), ["echo", "a", "b"], out, err) == 0
    assert out.getvalue() == "a b\n"


def test_run_builtin_dispatches_export():
    ctx = make_ctx()
    out, err = streams()
    assert run_builtin(ctx, ["export", "FOO=bar"], out, err) == 0
    assert ctx.env.get("FOO") == "bar"


@pytest.mark.parametrize("arg", ["-n", "-nn", "-nnnn"])
def test_is_n_flag_valid(arg):
    assert is_n_flag(arg) is True


@pytest.mark.parametrize("arg", ["-na", "-x", "-", "n", "", "--n"])
def test_is_n_flag_invalid(arg):
    assert is_n_flag(arg) is False


def test_echo_plain():
    out = io.StringIO()
    assert builtin_echo(["echo", "hello", "world"], out) == 0
    assert out.getvalue() == "hello world\n"


def test_echo_n_flags_consumed():
    out = io.StringIO()
    builtin_echo(["echo", "-n", "-nn", "hi", "-n"], out)
    assert out.getvalue() == "hi -n"


def test_echo_invalid_flag_printed():
    out = io.StringIO()
    builtin_echo(["echo", "-na", "x"], out)
    assert out.getvalue() == "-na x\n"


def test_echo_no_args():
    out = io.StringIO()
    builtin_echo(["echo"], out)
    assert out.getvalue() == "\n"


def test_pwd_writes_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out, err = streams()
    assert builtin_pwd(out, err) == 0
    assert out.getvalue() == os.getcwd() + "\n"


def test_cd_into_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    before = os.getcwd()
    (tmp_path / "sub").mkdir()
    ctx = make_ctx()
    out, err = streams()
    assert builtin_cd(ctx, ["cd", "sub"], out, err) == 0
    assert os.path.basename(os.getcwd()) == "sub"
    assert ctx.env.get("OLDPWD") == before
    assert ctx.env.get("PWD") == os.getcwd()
    assert out.getvalue() == ""


def test_cd_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(tmp_path)
    ctx = make_ctx(HOME=str(home))
    out, err = streams()
    assert builtin_cd(ctx, ["cd"], out, err) == 0
    assert os.path.samefile(os.getcwd(), home)


def test_cd_tilde_slash(tmp_path, monkeypatch):
    (tmp_path / "docs").mkdir()
    monkeypatch.chdir("/")
    ctx = make_ctx(HOME=str(tmp_path))
    out, err = streams()
    assert builtin_cd(ctx, ["cd", "~/docs"], out, err) == 0
    assert os.path.samefile(os.getcwd(), tmp_path / "docs")


def test_cd_home_not_set(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    ctx = make_ctx()
    out, err = streams()
    assert builtin_cd(ctx, ["cd"], out, err) == 1
    assert err.getvalue() == "minishell: cd: HOME not set\n"
    assert os.getcwd() == str(os.getcwd())


def test_cd_dash_prints_and_swaps(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    start = os.getcwd()
    (tmp_path / "a").mkdir()
    ctx = make_ctx()
    out, err = streams()
    builtin_cd(ctx, ["cd", "a"], out, err)
    assert builtin_cd(ctx, ["cd", "-"], out, err) == 0
    assert out.getvalue() == start + "\n"
    assert os.getcwd() == start


def test_cd_dash_without_oldpwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out, err = streams()
    assert builtin_cd(make_ctx(), ["cd", "-"], out, err) == 1
    assert err.getvalue() == "minishell: cd: OLDPWD not set\n"


def test_cd_missing_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    ctx = make_ctx()
    out, err = streams()
    assert builtin_cd(ctx, ["cd", "nowhere"], out, err) == 1
    assert err.getvalue().startswith("minishell: cd: nowhere: ")
    assert "OLDPWD" not in ctx.env


@pytest.mark.parametrize("text", ["0", "42", "  7  ", "+3", "9223372036854775807"])
def test_parse_exit_code_roundtrip_positive(text):
    assert parse_exit_code(text) == int(text)


def test_parse_exit_code_negative_limits():
    assert parse_exit_code("-9223372036854775808") == -(2**63)
    assert parse_exit_code(" -5") == -5


@pytest.mark.parametrize(
    "text", ["", "abc", "1a", "+", "-", "9223372036854775808", "-9223372036854775809", "1 2"]
)
def test_parse_exit_code_rejects(text):
    with pytest.raises(ValueError):
        parse_exit_code(text)


def test_exit_without_argument_keeps_status():
    ctx = make_ctx()
    ctx.last_status = 7
    with pytest.raises(ShellExit) as info:
        builtin_exit(ctx, ["exit"], io.StringIO())
    assert info.value.status == 7


def test_exit_with_code():
    ctx = make_ctx()
    with pytest.raises(ShellExit) as info:
        builtin_exit(ctx, ["exit", "42"], io.StringIO())
    assert info.value.status == 42
    assert ctx.last_status == 42


def test_exit_negative_wraps():
    ctx = make_ctx()
    with pytest.raises(ShellExit) as info:
        builtin_exit(ctx, ["exit", "-1"], io.StringIO())
    assert info.value.status == 255


def test_exit_non_numeric():
    ctx = make_ctx()
    err = io.StringIO()
    with pytest.raises(ShellExit) as info:
        builtin_exit(ctx, ["exit", "abc", "x"], err)
    assert info.value.status == 255
    assert ctx.last_status == 255
    assert err.getvalue() == "minishell: exit: abc: numeric argument required\n"


def test_exit_too_many_arguments():
    ctx = make_ctx()
    err = io.StringIO()
    assert builtin_exit(ctx, ["exit", "1", "2"], err) == 1
    assert ctx.last_status == 1
    assert err.getvalue() == "minishell: exit: too many arguments\n"


def test_unset_removes_and_ignores_invalid():
    ctx = make_ctx(A="1", B="2")
    err = io.StringIO()
    assert builtin_unset(ctx, ["unset", "A", "1bad"], err) == 0
    assert "A" not in ctx.env
    assert ctx.env.get("B") == "2"
    assert err.getvalue() == ""


def test_unset_option_continues():
    ctx = make_ctx(A="1")
    err = io.StringIO()
    assert builtin_unset(ctx, ["unset", "-x", "A"], err) == 2
    assert "A" not in ctx.env
    assert err.getvalue() == "minishell: unset: -x: invalid option\n"


def test_parse_env_args_split():
    overrides, idx = parse_env_args(["env", "A=1", "B=x=y", "echo", "C=3"])
    assert overrides == [("A", "1"), ("B", "x=y")]
    assert idx == 3


def test_parse_env_args_no_command():
    overrides, idx = parse_env_args(["env", "A=1"])
    assert overrides == [("A", "1")]
    assert idx is None


@pytest.mark.parametrize("arg", ["=x", "1A=2", "A-B=3"])
def test_parse_env_args_invalid(arg):
    with pytest.raises(ValueError):
        parse_env_args(["env", arg])


def test_env_lists_valued_variables_in_order():
    ctx = make_ctx(A="1", B=None, C="3")
    out, err = streams()
    assert builtin_env(ctx, ["env"], out, err) == 0
    assert out.getvalue() == "A=1\nC=3\n"


def test_env_with_overrides():
    ctx = make_ctx(A="1", B=None, C="3")
    out, err = streams()
    assert builtin_env(ctx, ["env", "A=x", "B=y", "D=4"], out, err) == 0
    assert out.getvalue() == "A=x\nB=y\nC=3\nD=4\n"
    assert ctx.env.get("A") == "1"
    assert "D" not in ctx.env


def test_env_invalid_identifier():
    out, err = streams()
    assert builtin_env(make_ctx(), ["env", "1X=2"], out, err) == 1
    assert err.getvalue() == "minishell: env: '1X=2': not a valid identifier\n"
    assert out.getvalue() == ""


def test_env_runs_builtin_with_overrides_isolated():
    ctx = make_ctx(A="1")
    ctx.last_status = 3
    out, err = streams()
    status = builtin_env(ctx, ["env", "FOO=bar", "env"], out, err)
    assert status == 3
    assert "FOO=bar\n" in out.getvalue()
    assert "FOO" not in ctx.env


def test_env_exit_command_gives_status_without_exiting():
    ctx = make_ctx()
    out, err = streams()
    assert builtin_env(ctx, ["env", "exit", "5"], out, err) == 5
    assert ctx.last_status == 5


def test_env_cd_does_not_move_shell(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "inner").mkdir()
    before = os.getcwd()
    ctx = make_ctx()
    out, err = streams()
    builtin_env(ctx, ["env", "cd", "inner"], out, err)
    assert os.getcwd() == before
    assert "PWD" not in ctx.env
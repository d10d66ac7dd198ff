# minishell

The stages of a small POSIX-style shell as a Python library. It turns a command
line into tokens, checks its shape, expands variables, builds the pipeline of
commands, reads here-documents, opens redirections, finds programs along
`PATH`, and runs the shell's builtin commands.

## Installation

```
pip install .
```

## Modules

- `minishell.lexer`: `tokenize(line)` splits a line into `Token` objects
  (`TokenKind.WORD` or `TokenKind.OP` with an `OpKind`). Single and double
  quotes are kept in the word; an open quote raises `UnclosedQuoteError`.
  The word after `<<` has its quotes removed, and is marked `no_expand` if it
  was quoted. Also `is_operator_char`, `has_unmatched_quote` and
  `strip_quotes`.
- `minishell.syntax`: `validate(tokens)` raises `ShellSyntaxError` (with
  `status = 2`) when a line starts with `|` or an operator is not followed by
  a word; `token_name` gives the name used in the message.
- `minishell.expander`: `expand_string(ctx, text, in_dquote)` expands `$NAME`,
  `$?` (last status) and `$$` (process id) and removes quotes; nothing is
  expanded inside single quotes, and `$` followed by a digit drops both.
  `expand_tokens(tokens, ctx)` expands every word: unquoted words that become
  empty are dropped, unquoted words holding spaces, tabs or newlines are split
  (`split_words`), and a redirection target that would be dropped or split
  raises `AmbiguousRedirectError`.
- `minishell.parser`: `parse(tokens)` returns a list of `Command` objects,
  one per `|`-separated part, each with `argv`, `redirs` (`Redirect` with a
  `RedirType`) and `heredocs` (`Heredoc`). A redirection without a word
  raises `ParseError`.
- `minishell.environment`: `Environment` keeps variables in definition order;
  a variable may exist without a value. `get`, `set`, `unset`, `entries` and
  `build_envp` (the `KEY=VALUE` list of variables with a value).
  `ShellContext` holds the environment, `last_status`, `interactive` and
  `exit_requested`. `is_valid_identifier` checks variable names.
- `minishell.startup`: `create_context(environ, interactive)` builds a
  `ShellContext` from a mapping or from `KEY=VALUE` strings (the process
  environment by default) and raises `SHLVL` by one (`increment_shlvl`).
- `minishell.builtins`: `run_builtin(ctx, argv, out, err)` runs `echo` (with
  `-n`, `-nn`, ...), `pwd`, `cd` (with `~`, `~/...` and `-`), `env`,
  `export`, `unset` and `exit`. `exit` raises `ShellExit` carrying the status
  instead of ending the process. `env NAME=VALUE cmd ...` runs a builtin on a
  copy of the shell state.
- `minishell.export`: `builtin_export` and `format_export`, the sorted
  `declare -x` listing.
- `minishell.redirections`: `collect_heredocs(ctx, pipeline, read_line)` reads
  every here-document through `read_line(prompt)` (which returns None at end
  of input); a `KeyboardInterrupt` from it raises `HeredocInterrupted`
  (`status = 130`). `apply_redirections(cmd)` opens the files and returns a
  `Redirections` context manager whose `stdin` and `stdout` are binary
  streams, or None where the command keeps the shell's own. A file that
  cannot be opened raises `RedirectionError` (`status = 1`).
- `minishell.pathsearch`: `resolve_path(ctx, name)` returns the program to
  run for a command name, searching `PATH` when the name has no slash; it
  raises `PathError` with `ENOENT`, `EACCES` or `EISDIR`.

## Example

```python
import io

from minishell.builtins import run_builtin
from minishell.expander import expand_tokens
from minishell.lexer import tokenize
from minishell.parser import parse
from minishell.redirections import apply_redirections, collect_heredocs
from minishell.startup import create_context
from minishell.syntax import validate

ctx = create_context({"USER": "alice"}, interactive=False)

tokens = validate(tokenize('echo "$USER" > out.txt | wc -c'))
for command in parse(expand_tokens(tokens, ctx)):
    print(command.argv, command.redirs)

out, err = io.StringIO(), io.StringIO()
run_builtin(ctx, ["export", "GREETING=hello"], out, err)
run_builtin(ctx, ["echo", "-n", "hi"], out, err)
print(out.getvalue())          # hi

lines = iter(["$USER", "EOF"])
pipeline = parse(expand_tokens(validate(tokenize("cat << EOF")), ctx))
collect_heredocs(ctx, pipeline, lambda prompt: next(lines, None))
with apply_redirections(pipeline[0]) as redir:
    print(redir.stdin.read())  # b'alice\n'
```

## What it does not do

This package has no command to start and no prompt loop. It does not start
external programs, connect commands with pipes, or wait for them; it does
not install signal handlers. It provides the pieces from reading a line up
to a resolved program path, opened redirections and builtin results; running
the pipeline is left to the code that uses it.
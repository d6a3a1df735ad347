import pytest

from clidispatch import Application, ApplicationError, RunOptions, Unset, arg, fail
from clidispatch.exceptions import ConfigurationError, InternalError, NonZeroExitError

RUNTIME = ["python", "test-app.py"]
THROW = RunOptions(throw_on_error=True)


@pytest.fixture
def calls():
    return []


@pytest.fixture
def app(calls):
    app = Application("test-app", "An application used in tests.")

    def record(options, application):
        calls.append(options)

    app.command("cmd1", "Does the first thing.").aliases("c1").args(
        named_args={
            "required": arg().description("A required argument."),
            "optional": arg().optional(),
            "flag": arg().valueless().aliases("f"),
            "level": arg().default("3"),
            "namedarg1": arg().aliases("alias1"),
        },
        aliases={"r": "required"},
        positional_args=[
            {"name": "target", "description": "The target."},
            {"name": "extra", "optional": True},
        ],
    ).impl(record)
    return app


@pytest.mark.asyncio
async def test_end_to_end(app, calls):
    exit_code = await app.run(
        [*RUNTIME, "cmd1", "--required", "yes", "--namedarg1", "v", "tgt"], THROW
    )
    assert exit_code == 0
    (options,) = calls
    assert options.command_name == "cmd1"
    assert options.positional_args == ["tgt", None]
    assert options.named_args == {
        "required": "yes",
        "optional": Unset,
        "flag": False,
        "level": "3",
        "namedarg1": "v",
    }
    assert options.unparsed_args == ("--required", "yes", "--namedarg1", "v", "tgt")
    assert options.runtime_args == ("python", "test-app.py")


@pytest.mark.asyncio
async def test_alias_is_equivalent_to_canonical_name(app, calls):
    await app.run([*RUNTIME, "cmd1", "tgt", "--required=x", "--alias1", "v"], THROW)
    await app.run([*RUNTIME, "cmd1", "tgt", "--required=x", "--namedarg1", "v"], THROW)
    assert calls[0].named_args == calls[1].named_args
    assert "alias1" not in calls[0].named_args


@pytest.mark.asyncio
async def test_command_alias_routes_to_command(app, calls):
    await app.run([*RUNTIME, "c1", "tgt", "-r", "x", "--namedarg1=v"], THROW)
    assert calls[0].command_name == "cmd1"
    assert calls[0].named_args["required"] == "x"


@pytest.mark.asyncio
async def test_user_value_beats_default(app, calls):
    await app.run(
        [*RUNTIME, "cmd1", "tgt", "--required=x", "--namedarg1=v", "--level", "9"], THROW
    )
    assert calls[0].named_args["level"] == "9"


@pytest.mark.asyncio
async def test_blank_value_uses_default(app, calls):
    await app.run(
        [*RUNTIME, "cmd1", "tgt", "--required=x", "--namedarg1=v", "--level"], THROW
    )
    assert calls[0].named_args["level"] == "3"


@pytest.mark.asyncio
async def test_valueless_flag_does_not_consume_positional(app, calls):
    await app.run(
        [*RUNTIME, "cmd1", "--required=x", "--namedarg1=v", "-f", "tgt"], THROW
    )
    assert calls[0].named_args["flag"] is True
    assert calls[0].positional_args == ["tgt", None]


@pytest.mark.asyncio
async def test_optional_passed_without_value_is_none(app, calls):
    await app.run(
        [*RUNTIME, "cmd1", "tgt", "--required=x", "--namedarg1=v", "--optional"], THROW
    )
    assert calls[0].named_args["optional"] is None


@pytest.mark.asyncio
async def test_missing_required_named_argument(app):
    with pytest.raises(ApplicationError) as exc_info:
        await app.run([*RUNTIME, "cmd1", "tgt", "--namedarg1=v"], THROW)
    message = exc_info.value.message
    assert 'No value specified for required named argument "required".' in message
    assert "To specify it, run the command with --required <value>" in message
    assert "for usage instructions, run test-app help cmd1" in message


@pytest.mark.asyncio
async def test_missing_required_positional(app):
    with pytest.raises(ApplicationError, match='Missing required positional argument "target"'):
        await app.run([*RUNTIME, "cmd1", "--required=x", "--namedarg1=v"], THROW)


@pytest.mark.asyncio
async def test_unexpected_named_argument(app):
    with pytest.raises(ApplicationError, match="Unexpected argument --bogus=1"):
        await app.run(
            [*RUNTIME, "cmd1", "tgt", "--required=x", "--namedarg1=v", "--bogus=1"],
            THROW,
        )


@pytest.mark.asyncio
async def test_excess_positionals_are_kept(app, calls):
    await app.run(
        [*RUNTIME, "cmd1", "a", "b", "c", "--required=x", "--namedarg1=v"], THROW
    )
    assert calls[0].positional_args == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_excess_positionals_error_policy(calls):
    app = Application("strict")
    app.command("go").args(positional_arg_count_check="error").impl(
        lambda options, application: calls.append(options)
    )
    with pytest.raises(ApplicationError, match="expects at most 0 positional arguments"):
        await app.run([*RUNTIME, "go", "extra"], THROW)
    assert calls == []


@pytest.mark.asyncio
async def test_warn_policy_prints_warning_and_continues(calls, capsys):
    app = Application("lenient")
    app.command("go").args(unexpected_named_arg_check="warn").impl(
        lambda options, application: calls.append(options)
    )
    assert await app.run([*RUNTIME, "go", "--what"], THROW) == 0
    captured = capsys.readouterr()
    assert "Warning: Unexpected argument --what" in captured.err
    assert calls[0].named_args == {"what": None}


@pytest.mark.asyncio
async def test_excess_positionals_warn_policy(calls, capsys):
    app = Application("lenient")
    app.command("go").args(
        positional_arg_count_check="warn", positional_args=[{"name": "file"}]
    ).impl(lambda options, application: calls.append(options))
    assert await app.run([*RUNTIME, "go", "a", "b", "c"], THROW) == 0
    captured = capsys.readouterr()
    assert (
        "Warning: this subcommand expects at most 1 positional arguments, "
        "but 3 arguments were passed"
    ) in captured.err
    assert calls[0].positional_args == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_help_flag_reaches_handler_when_disabled(calls, capsys):
    """`--help` is a reserved name, so it passes the unexpected-argument check."""
    app = Application("raw")
    app.command("go").args(allow_help_named_arg=False).impl(
        lambda options, application: calls.append(options)
    )
    assert await app.run([*RUNTIME, "go", "--help"], THROW) == 0
    assert calls[0].command_name == "go"
    assert calls[0].named_args == {"help": None}
    captured = capsys.readouterr()
    assert "Help for" not in captured.out
    assert captured.err == ""


@pytest.mark.asyncio
async def test_required_valueless_argument():
    seen = []
    app = Application("confirm")
    app.command("wipe").args(
        named_args={"yes-really": arg().valueless().required()}
    ).impl(lambda options, application: seen.append(options.named_args))
    await app.run([*RUNTIME, "wipe", "--yes-really"], THROW)
    assert seen == [{"yes-really": True}]
    with pytest.raises(ApplicationError, match="run the command with --yes-really\n"):
        await app.run([*RUNTIME, "wipe"], THROW)


@pytest.mark.asyncio
async def test_handler_return_becomes_exit_code():
    app = Application("codes")
    app.command("three").impl(lambda options, application: 3)
    assert await app.run([*RUNTIME, "three"]) == 3


@pytest.mark.asyncio
async def test_async_handler():
    app = Application("codes")

    async def handler(options, application):
        return 7

    app.command("seven").impl(handler)
    assert await app.run([*RUNTIME, "seven"]) == 7


@pytest.mark.asyncio
async def test_non_zero_return_without_exit_code_capture():
    app = Application("codes")
    app.command("three").impl(lambda options, application: 3)
    options = RunOptions(throw_on_error=True, set_exit_code_on_handler_return=False)
    with pytest.raises(NonZeroExitError, match="Non-zero exit code: 3"):
        await app.run([*RUNTIME, "three"], options)
    app.command("zero").impl(lambda options, application: 0)
    assert await app.run([*RUNTIME, "zero"], options) == 0


@pytest.mark.asyncio
async def test_uncaptured_non_zero_return_is_reported(capsys):
    app = Application("codes")
    app.command("three").impl(lambda options, application: 3)
    options = RunOptions(set_exit_code_on_handler_return=False)
    assert await app.run([*RUNTIME, "three"], options) == 3
    assert "Error: Non-zero exit code: 3" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_exit_process_on_handler_return():
    app = Application("codes")
    app.command("four").impl(lambda options, application: 4)
    with pytest.raises(SystemExit) as exc_info:
        await app.run([*RUNTIME, "four"], RunOptions(exit_process_on_handler_return=True))
    assert exc_info.value.code == 4


@pytest.mark.asyncio
async def test_application_error_is_printed(capsys):
    app = Application("failing")

    def handler(options, application):
        fail("the disk is full", exit_code=5)

    app.command("save").impl(handler)
    assert await app.run([*RUNTIME, "save"]) == 5
    captured = capsys.readouterr()
    assert "Error: the disk is full" in captured.err


@pytest.mark.asyncio
async def test_unhandled_error_is_reported(capsys):
    app = Application("failing")

    def handler(options, application):
        raise RuntimeError("boom")

    app.command("explode").impl(handler)
    assert await app.run([*RUNTIME, "explode"]) == 1
    captured = capsys.readouterr()
    assert "unhandled runtime error" in captured.err
    assert "boom" in captured.err


@pytest.mark.asyncio
async def test_throw_on_error_reraises():
    app = Application("failing")

    def handler(options, application):
        raise RuntimeError("boom")

    app.command("explode").impl(handler)
    with pytest.raises(RuntimeError, match="boom"):
        await app.run([*RUNTIME, "explode"], THROW)


@pytest.mark.asyncio
async def test_invalid_argv():
    with pytest.raises(InternalError, match="invalid argv"):
        await Application("short").run(["python"])


@pytest.mark.asyncio
async def test_source_directory_is_set(tmp_path):
    app = Application("paths")
    seen = []
    app.command("where").impl(
        lambda options, application: seen.append(application.source_directory)
    )
    await app.run(["python", str(tmp_path / "script.py"), "where"], THROW)
    assert seen == [tmp_path.resolve()]


@pytest.mark.asyncio
async def test_default_command():
    seen = []
    app = Application("defaults")
    app.command("main").default().args(positional_args=[{"name": "file"}]).impl(
        lambda options, application: seen.append(options.positional_args)
    )
    app.command("other").impl(lambda options, application: None)
    await app.run([*RUNTIME, "input.txt"], THROW)
    assert seen == [["input.txt"]]


@pytest.mark.asyncio
async def test_dangling_command_alias():
    app = Application("aliases")
    app.alias("x", "missing")
    with pytest.raises(ConfigurationError, match="not a valid subcommand"):
        await app.run([*RUNTIME, "x"])


def test_main_exits_with_exit_code():
    app = Application("tool")
    app.command("two").impl(lambda options, application: 2)
    with pytest.raises(SystemExit) as exc_info:
        app.main(["tool.py", "two"])
    assert exc_info.value.code == 2


@pytest.mark.asyncio
async def test_required_named_and_positional():
    seen = []
    app = Application("test-app")
    app.command("cmd1").args(
        named_args={"required": arg()}, positional_args=[{"name": "target"}]
    ).impl(lambda options, application: seen.append(options))
    await app.run([*RUNTIME, "cmd1", "--required", "x", "t1"], THROW)
    assert seen[0].named_args["required"] == "x"
    assert seen[0].positional_args[0] == "t1"
    # Positionals are filled before named arguments are checked, so with both
    # missing the positional error wins. Passing the target surfaces the named one.
    with pytest.raises(ApplicationError, match="required positional argument"):
        await app.run([*RUNTIME, "cmd1"], THROW)
    with pytest.raises(ApplicationError, match="required named argument"):
        await app.run([*RUNTIME, "cmd1", "t1"], THROW)

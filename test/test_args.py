from typing import List

from boshmetrics.args import get_arg_parser, ArgumentParser, Namespace, convert, NoneType
from boshmetrics.logger import add_args as logging_add_args


def test_args(monkeypatch):
    monkeypatch.setattr(ArgumentParser, "args", Namespace())
    assert ArgumentParser.args.does_not_exist is None

    arg_parser = get_arg_parser()
    logging_add_args(arg_parser)
    arg_parser.parse_args([])
    assert ArgumentParser.args.verbose is False

    monkeypatch.setenv("BOSHMETRICS_VERBOSE", "true")
    monkeypatch.setenv("BOSHMETRICS_TEST_INT", "123")
    arg_parser = get_arg_parser()
    logging_add_args(arg_parser)
    arg_parser.add_argument(
        "--test-int",
        dest="test_int",
        type=int,
        default=0,
    )
    arg_parser.parse_args([])
    assert ArgumentParser.args.verbose is True
    assert ArgumentParser.args.test_int == 123


def test_convert() -> None:
    def make_a_list(s: str) -> List[str]:
        return s.split(",")

    # coercing works
    assert convert(None, NoneType) is None
    assert convert("3", int) == 3
    assert convert("3.4", float) == 3.4
    assert convert("true", bool) is True
    assert convert("false", bool) is False

    # coercing is not possible
    assert convert("no_int", int) == "no_int"
    assert convert("no_float", float) == "no_float"

    # does not know how to handle
    assert convert("args", ArgumentParser) == "args"

    # call a function
    assert convert("1,2,3,4", make_a_list) == ["1", "2", "3", "4"]


def test_parse_known_args_keeps_unknown_arguments():
    arg_parser = get_arg_parser()
    logging_add_args(arg_parser)
    args, unknown = arg_parser.parse_known_args(["--quiet", "--not-an-option", "value"])
    assert args.quiet is True
    assert unknown == ["--not-an-option", "value"]
    assert ArgumentParser.args is args

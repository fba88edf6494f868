from rich.pretty import pprint

from optscan import *


def main(prompt=None):
    parser = Parser(prompt or ["a/b/notes", "music", "--md5sum", "--recursive", "true", "--quiet=true", "interest/2014"])

    parser.add("md5sum", Type.BOOL, True, "turn on md5 checksumming")
    parser.add_option("d", "depth", Type.INT, 2, "the traversal depth")
    parser.add("name", Type.STRING, "", "the name to use")
    parser.add_option("r", "recursive", Type.BOOL, True, "traverse recursively?")
    parser.add("frequency", Type.FLOAT32, 10.0, "the frequency of the throttle")

    try:
        parser.parse()
    except ParserException as error:
        report(error)
        return 1

    parser.print_help()
    pprint({key: parser.get(key) for key in ("recursive", "md5sum", "depth", "frequency")})
    pprint(parser.args)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())

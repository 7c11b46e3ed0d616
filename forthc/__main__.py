"""Command line entry: forthc SOURCE writes ./code.s"""
import argparse
import sys

from forthc.compilador.pipeline import CompileIOError, pipeline_from_file


def build_parser():
    parser = argparse.ArgumentParser(
        prog='forthc',
        description='Compile a Forth source file to x86-64 assembly (code.s in the current directory).',
    )
    parser.add_argument('source', help='Forth source file (e.g. code.fs)')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        pipeline_from_file(args.source)
    except CompileIOError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

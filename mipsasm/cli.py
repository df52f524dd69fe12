# mipsasm/cli.py
import argparse
import logging
import os
import sys

from mipsasm.mips_assembler import MipsAssembler
from mipsasm.mips_consts import UINT32_MAX

log = logging.getLogger(__name__)


def _parse_address(text):
    return int(text, 0)


def build_parser():
    parser = argparse.ArgumentParser(
        description='Assemble MIPS source into an object listing',
        prog='mipsasm',
    )
    parser.add_argument('input_asm', type=str, help='input source file')
    parser.add_argument('-o', '--output', type=str, default='a.out', help='output object listing (default "a.out")')
    parser.add_argument('-i', '--intermediate', type=str, help='also write the pass-one listing to this file')
    parser.add_argument('-b', '--base', type=_parse_address, default=0, help='address of the first instruction (default 0)')
    parser.add_argument('--log', type=str, help='write assembler log messages to this file')
    parser.add_argument('-v', '--verbose', action='store_true', help='verbose assembler output')
    return parser


def cli_main(argv=None):
    args = build_parser().parse_args(argv)

    log_fmt = '%(levelname)s: %(message)s'
    logging.basicConfig(format=log_fmt, level=logging.DEBUG if args.verbose else logging.WARNING, stream=sys.stderr)
    handler = None
    if args.log:
        handler = logging.FileHandler(args.log, mode='w')
        handler.setFormatter(logging.Formatter(log_fmt))
        logging.getLogger().addHandler(handler)
    try:
        return _run(args)
    finally:
        if handler is not None:
            logging.getLogger().removeHandler(handler)
            handler.close()


def _run(args):
    if not os.path.exists(args.input_asm):
        raise SystemExit('missing input file: {}'.format(args.input_asm))

    if not 0 <= args.base <= UINT32_MAX:
        raise SystemExit('base address out of range: {}'.format(args.base))

    if args.base % 4 != 0:
        raise SystemExit('base address must be word-aligned: 0x{:08x}'.format(args.base))

    with open(args.input_asm) as f:
        source = f.read()

    assembler = MipsAssembler(base_address=args.base)
    result = assembler.assemble(source)

    if args.intermediate:
        with open(args.intermediate, 'w') as out_int:
            assembler.write_intermediate(out_int)

    if result['errors']:
        for err in result['errors']:
            log.error('{}:{}: {} ({})'.format(args.input_asm, err['line'], err['message'], err['text']))
        return 1

    with open(args.output, 'w') as out_obj:
        assembler.write_object(out_obj)
    log.info('wrote {} words to {}'.format(len(assembler.machine_code), args.output))
    return 0


if __name__ == '__main__':
    sys.exit(cli_main())

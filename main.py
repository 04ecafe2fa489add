from rich.pretty import pprint

from cmdwrap import *

__prog__ = "perl-demo"


class Perl(Command, verbose=True):
    e = Option(descr="one line of program")
    w = Flag(descr="enable warnings")


if __name__ == '__main__':
    perl = Perl(e='print join ", ", @ARGV', w=True)
    pprint(perl)
    try:
        perl.run("foo", "bar", "baz")
    except CommandException as fault:
        trigger(fault, shell=True, fancy=True)
    pprint(perl.stdout)

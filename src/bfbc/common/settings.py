from bfbc.common.conf import TAPE_SIZE, MAX_NESTING, EOF_MAX

MODE_BC = 'bc'
MODE_NAIVE = 'naive'
MODES = (MODE_BC, MODE_NAIVE)


class RunSettings:
    mode: str
    dump: bool
    dump_only: bool
    time: bool
    stats: bool
    verbose: bool
    tape_size: int
    max_nesting: int
    eof: str

    def __init__(self):
        self.mode = MODE_BC
        self.dump = False
        self.dump_only = False
        self.time = False
        self.stats = False
        self.verbose = False
        self.tape_size = TAPE_SIZE
        self.max_nesting = MAX_NESTING
        self.eof = EOF_MAX

    def update(self, **params):
        for name, value in params.items():
            if not hasattr(self, name):
                raise UserWarning(f'Unknown setting {name}')

            if value is not None:
                setattr(self, name, value)

        # Dumping only implies dumping
        if self.dump_only:
            self.dump = True

        return self

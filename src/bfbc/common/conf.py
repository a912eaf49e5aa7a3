TAPE_SIZE = 30000       # Cells on the tape
MAX_NESTING = 100       # Concurrently open loops, 0 for unlimited
WORD_SIZE = 4           # Bytes per encoded instruction

EOF_MAX = 'max'                 # EOF reads as 0xFF
EOF_ZERO = 'zero'               # EOF reads as 0x00
EOF_UNCHANGED = 'unchanged'     # EOF leaves the cell alone
EOF_POLICIES = (EOF_MAX, EOF_ZERO, EOF_UNCHANGED)

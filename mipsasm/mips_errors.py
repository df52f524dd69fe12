# mipsasm/mips_errors.py
"""
Exception hierarchy for the assembler.

AssemblerError (base)
├── MisalignedAddressError   - address not a multiple of 4
├── DuplicateNameError       - name already present in a unique table
├── NotFoundError            - symbol lookup miss
├── InvalidArityError        - wrong operand count for a mnemonic
├── InvalidOperandError      - register/immediate/label fails to parse or is out of range
├── UnresolvedLabelError     - branch target absent from the label table
├── UnreachableBranchError   - branch target outside the 16-bit displacement range
├── UnknownInstructionError  - mnemonic not recognized
└── AllocationFailureError   - resource exhaustion, fatal

Everything except AllocationFailureError is reported per instruction and
leaves the tables and the output untouched.
"""


class AssemblerError(Exception):
    """Base class for all assembler errors."""
    kind = "AssemblerError"

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class MisalignedAddressError(AssemblerError):
    kind = "MisalignedAddress"


class DuplicateNameError(AssemblerError):
    kind = "DuplicateName"


class NotFoundError(AssemblerError):
    kind = "NotFound"


class InvalidArityError(AssemblerError):
    kind = "InvalidArity"

    @classmethod
    def for_instruction(cls, name, expected, got):
        return cls(f"Incorrect operand count for '{name}'. Expected {expected}, got {got}.")


class InvalidOperandError(AssemblerError):
    kind = "InvalidOperand"


class UnresolvedLabelError(AssemblerError):
    kind = "UnresolvedLabel"


class UnreachableBranchError(AssemblerError):
    kind = "UnreachableBranch"


class UnknownInstructionError(AssemblerError):
    kind = "UnknownInstruction"


class AllocationFailureError(AssemblerError):
    """Raised when storage for a table entry cannot be obtained. Terminates the run."""
    kind = "AllocationFailure"

# Trace Package
from .parser import TraceParser, BranchTrace, create_sample_trace, generate_branches
from .formats import TraceFormat, BranchRecord, SimpleTextFormat, BinaryTraceFormat

__all__ = [
    'TraceParser',
    'BranchTrace',
    'create_sample_trace',
    'generate_branches',
    'TraceFormat',
    'BranchRecord',
    'SimpleTextFormat',
    'BinaryTraceFormat',
]

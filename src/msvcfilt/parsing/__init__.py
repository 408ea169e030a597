from .tokenizer import RE_DECORATED_SYMBOL, MatchSpan, scan, candidates
from .transformer import transform, process_line, format_kept, Undecorator

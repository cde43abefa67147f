from .canvas import draw_hline, draw_pixel, draw_vline, fill_rect, new_canvas
from .dirty import DirtyState, clip_rect, union_rect
from .draw_lines import dash_pattern_for_key, draw_segment
from .draw_markers import draw_mark, draw_markers, mark_shape
from .draw_text import draw_text, draw_text_anchored, text_size

__all__ = [
    "DirtyState",
    "clip_rect",
    "dash_pattern_for_key",
    "draw_hline",
    "draw_mark",
    "draw_markers",
    "draw_pixel",
    "draw_segment",
    "draw_text",
    "draw_text_anchored",
    "draw_vline",
    "fill_rect",
    "mark_shape",
    "new_canvas",
    "text_size",
    "union_rect",
]

from .wrapper import LayoutClient, FakeClient, create_client
from .json_parser import LayoutJSONParser, parse_layout
from .envelope import unwrap_envelope
from .prompts import build_capabilities, build_system_message, build_user_message, LAYOUT_SCHEMA_HINT

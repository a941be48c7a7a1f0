import re

__all__ = (
    'CodeBuilder',
    'capitalize',
    'js_string',
    'path_parameters',
    'title_case',
    'type_prefix',
)

_PATH_PARAM = re.compile(r'\{([a-zA-Z0-9_]+)\}')


def capitalize(input_string):
    if not input_string:
        return ''
    return input_string[0].upper() + input_string[1:]


def title_case(name: str) -> str:
    """Turn a project name like ``published-api`` into ``Published Api``."""
    words = re.sub(r'[-_]', ' ', name)
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), words)


def path_parameters(path: str) -> list[str]:
    """Names of the ``{param}`` placeholders of a route path, in order."""
    return _PATH_PARAM.findall(path)


def js_string(value: str) -> str:
    """Render ``value`` as a single-quoted TypeScript string literal."""
    escaped = value.replace('\\', '\\\\').replace("'", "\\'").replace('\n', '\\n')
    return f"'{escaped}'"


class CodeBuilder:
    """Helper for building indented code with automatic indent management."""

    def __init__(self, indent_size: int = 2):
        self.lines: list[str] = []
        self.indent_level = 0
        self.indent_size = indent_size

    def add_line(self, line: str = ''):
        """Add line with current indentation."""
        if line.strip():
            self.lines.append(' ' * (self.indent_level * self.indent_size) + line)
        else:
            self.lines.append('')

    def add_lines(self, lines: list[str]):
        for line in lines:
            self.add_line(line)

    def add_doc(self, *lines: str):
        """Add a ``/** ... */`` comment block."""
        self.add_line('/**')
        for line in lines:
            self.add_line(f' * {line}' if line else ' *')
        self.add_line(' */')

    def indent(self):
        self.indent_level += 1

    def dedent(self):
        self.indent_level = max(0, self.indent_level - 1)

    def add_block(self, opening: str, closing: str = '}'):
        """Context manager for blocks like ``{ ... }``."""
        return BlockContext(self, opening, closing)

    def get_code(self) -> str:
        """Get the final code, ending with a single newline."""
        return '\n'.join(self.lines).rstrip('\n') + '\n'


class BlockContext:
    """Context manager for automatic block indentation."""

    def __init__(self, builder: CodeBuilder, opening: str, closing: str):
        self.builder = builder
        self.closing = closing
        self.builder.add_line(opening)
        self.builder.indent()

    def __enter__(self):
        return self.builder

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.builder.dedent()
        self.builder.add_line(self.closing)
        return None


def type_prefix(project_name: str) -> str:
    """Prefix of generated class names: the project name, first letter upper-cased.

    Characters that cannot appear in an identifier are dropped, so
    ``published-api`` becomes ``Publishedapi``.
    """
    return capitalize(re.sub(r'[^A-Za-z0-9_$]', '', project_name))

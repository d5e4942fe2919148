"""MPlayer slave-mode protocol.

Only the handful of commands the supervisor needs are modelled here. Every
command is a single line of text written to the player's stdin; answers come
back on stdout as ``ANS_<property>=<value>`` lines.
Ref: http://www.mplayerhq.hu/DOCS/tech/slave.txt
"""

DEFAULT_BINARY = "mplayer"

# Quiet output, line commands on stdin, stay alive with nothing loaded
PLAYER_ARGS = ("-quiet", "-slave", "-idle")

STOP = "stop"
GET_PATH = "get_property path"

# Answer to GET_PATH when nothing is loaded, i.e. playback has ended
NO_PATH_ANSWER = "ANS_path=(null)"


def loadfile(path: str) -> str:
    """Build the command that starts playing ``path``."""
    return f"loadfile {path}"


def format_command(text: str) -> str:
    """Terminate a command for writing to the player's stdin.

    Raises ValueError if ``text`` spans more than one line, since the player
    would read it as several commands.
    """
    if "\n" in text or "\r" in text:
        raise ValueError(f"Command must be a single line: {text!r}")
    return text + "\n"


def is_stop_signal(line: str) -> bool:
    """Return True if an output line means nothing is playing anymore."""
    return line.strip() == NO_PATH_ANSWER


def build_argv(binary: str = DEFAULT_BINARY) -> list[str]:
    return [binary, *PLAYER_ARGS]

from rich.pretty import pprint

from clasp import *

open_window = Command("open-window", "Open a new window", (
    Argument(str, "title")("Title of the window").default_to("untitled") |
    Option(int, "width")["-w"]["--width"]("Width of the window").default_to(1920).check(
        lambda width: width > 0, "width must be positive"
    ) |
    Option(int, "height")["-h"]["--height"]("Height of the window").default_to(1080) |
    Flag("fullscreen")["-f"]["--fullscreen"]("Open the window in fullscreen")
))

fetch_url = Command("fetch-url", "Fetch a resource", (
    Option(str, "url")["--url"]("Address of the resource") |
    Option(list[str], "headers")["--headers"]("Extra headers, space separated").default_to([])
))

parser = SharedOptions(Flag("verbose")["-v"]["--verbose"]("Print more diagnostics")) | open_window | fetch_url


if __name__ == '__main__':
    if (result := invoke(parser, fancy=True)).shared.verbose:
        print_help(parser, fancy=True)
    pprint(result)

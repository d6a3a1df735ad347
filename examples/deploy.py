import asyncio

from clidispatch import Application, Unset, arg, fail
from clidispatch.utils import setup_logging

setup_logging()

app = Application("deploy", "Build and ship the web frontend.")


@app.command("build", "Build the frontend bundle.").aliases("b").args(
    named_args={
        "release": arg().description("Minify and strip source maps.").valueless().aliases("r"),
        "out": arg().description("Output directory.").default("dist").aliases("o"),
    },
    positional_args=[{"name": "target", "description": "Which bundle to build."}],
).impl
def build(options, application):
    mode = "release" if options.named_args["release"] else "debug"
    print(f"Building {options.positional_args[0]} ({mode}) into {options.named_args['out']}")


@app.command("push", "Upload a built bundle.").args(
    named_args={
        "host": arg().description("Server to upload to."),
        "token": arg().description("API token. Read from the environment if omitted.").optional(),
    },
).impl
async def push(options, application):
    token = options.named_args["token"]
    if token is None:
        fail("--token was passed without a value")
    if token is Unset:
        token = "<from environment>"
    await asyncio.sleep(0.1)
    print(f"Pushed to {options.named_args['host']} with token {token}")
    return 0


def add_cache_commands(cache: Application) -> None:
    cache.command("clear", "Remove cached build artifacts.").impl(
        lambda options, application: print("Cache cleared")
    )


app.category("cache", "Manage the build cache.", add_cache_commands)

if __name__ == "__main__":
    app.main()

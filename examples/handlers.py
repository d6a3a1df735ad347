"""Handlers referenced from clidispatch.yaml."""


def greet(options, application):
    name = options.positional_args[0]
    greeting = options.named_args["greeting"]
    print(f"{greeting}, {name}!")
    if options.named_args["shout"]:
        print(f"{greeting.upper()}, {name.upper()}!")


def reset(options, application):
    print(f"Resetting {application.name}")
    return 0

import os.path

from pydantic import BaseModel, Field

from arbor import CLI, CommandError


class UserFlags(BaseModel):
    username: str = Field(min_length=1)
    admin: bool = False


class GreetFlags(BaseModel):
    name: str = "World"
    shout: bool = False


cli = CLI("user-manager", "2.0.0")


@cli.before_each
def remember(ctx):
    ctx["invoked"] = " ".join(ctx.args)


@cli.register_command(
    "user add",
    description="Add a new user",
    examples=("user add --username=alice", "user add --username=bob --admin"),
    validator=UserFlags,
)
def add(args, flags, ctx):
    if flags.username == "root":
        raise CommandError("refusing to add the root user", exit_code=2)
    ctx.log("added %s%s" % (flags.username, " (admin)" if flags.admin else ""))


@cli.register_command("user remove", description="Remove a user", aliases=("rm",), validator=UserFlags)
async def remove(args, flags, ctx):
    ctx.warn("removing %s" % flags.username)


@cli.register_command("greet", description="Say hello", examples="greet --name=Alice", validator=GreetFlags)
def greet(args, flags, ctx):
    message = "Hello, %s!" % flags.name
    ctx.log(message.upper() if flags.shout else message)


cli.register_lazy_command(
    "compute sum",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "demo", "compute.py"),
    "total",
    description="Add numbers",
    examples="compute sum 1 2 3",
)


if __name__ == '__main__':
    cli.main()

"""
Handlers for the demo's lazily imported "compute" commands.

Loaded from its file path the first time "compute sum" runs.
"""


def total(args, flags, ctx):
    numbers = [float(arg) for arg in args]
    result = sum(numbers)
    if ctx.output == "text":
        ctx.log("%s = %g" % (" + ".join(args) or "0", result))
    else:
        ctx.log({"operands": numbers, "sum": result})


default = total

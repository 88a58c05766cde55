from invoke import task


@task
def lint(c):
    c.run("ruff check src tests tasks.py")


@task
def format_check(c):
    c.run("ruff format --check src tests tasks.py")


@task
def test(c, k=None):
    c.run(f"pytest -k '{k}'" if k else "pytest")


@task
def leaderboard(c, data, config="contest.yaml", event=None):
    """Import a seed file and print the judge leaderboard with its balanced top-N."""
    c.run(f"story-contest load {data} -c {config}")
    event_opt = f" --event {event}" if event else ""
    c.run(f"story-contest leaderboard -c {config} --filter judge-only --top{event_opt}")
    c.run(f"story-contest community -c {config}{event_opt}")


@task
def ci(c):
    lint(c)
    format_check(c)
    test(c)

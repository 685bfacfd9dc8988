import time

import click
from flask.cli import with_appcontext

from models import db, Concert
from services import probe_availability, playback_url_for
from services.player_state import PlayerState, StreamWatcher
from utils import isoformat, utc_now


@click.command('watch-stream')
@click.argument('concert_id', type=int)
@click.option('--once', is_flag=True, help='Take a single reading and exit.')
@with_appcontext
def watch_stream(concert_id, once):
    """Poll a concert's playlist the way the player does until the window closes."""
    concert = db.session.get(Concert, concert_id)
    if concert is None:
        raise click.ClickException(f"Concert {concert_id} not found")

    playback_url = playback_url_for(concert)
    watcher = StreamWatcher(concert.date)
    click.echo(f"[Watch] Concert {concert.id} starts {isoformat(concert.date)}, "
               f"playlist {playback_url or '(not configured)'}")

    while True:
        now = utc_now()
        watcher.advance(now)
        if watcher.should_probe:
            watcher.begin_probe(now)
            watcher.record_probe(now, probe_availability(playback_url))

        click.echo(f"[Watch] {isoformat(now)} state={watcher.state.value} "
                   f"live={watcher.last_probe_ok} ever_live={watcher.ever_live}")

        if once or watcher.state is PlayerState.ENDED:
            return
        time.sleep(watcher.next_poll_delay())


def register_commands(app):
    app.cli.add_command(watch_stream)

# main.py
import sys, os
sys.path.append(os.path.dirname(__file__))  # 確保能找到 config.py

import argparse
import logging, traceback
from config import AppConfig, RenderConfig, AudioConfig, PlaybackConfig, LogConfig
from audio.base import WAVEFORMS
from songs.library import song_names
from utils.crashlog import setup_crashlog, log_exception, log_dir

def _init_logging(cfg: LogConfig):
    logs = log_dir()
    log_path = os.path.join(logs, "app.log")

    if logging.getLogger().handlers:
        return

    level = getattr(logging, cfg.level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        encoding="utf-8"
    )
    try:
        from logging.handlers import RotatingFileHandler
        fh = RotatingFileHandler(log_path, maxBytes=2*1024*1024, backupCount=3, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logging.getLogger().addHandler(fh)
    except OSError:
        logging.warning("file logging disabled, cannot open %s", log_path)

def build_config(argv=None) -> AppConfig:
    ap = argparse.ArgumentParser(description="Melody Roll: type a melody, watch it scroll, play along.")
    ap.add_argument('--script', help='melody script to open in the editor')
    ap.add_argument('--ghost', choices=song_names(), help='built-in song shown as ghost melody')
    ap.add_argument('--bpm', type=float, default=120.0)
    ap.add_argument('--waveform', default='triangle', choices=list(WAVEFORMS))
    ap.add_argument('--volume', type=float, default=0.5)
    ap.add_argument('--midi-in', help='MIDI input name (default: every input)')
    ap.add_argument('--pixels-per-beat', type=float, default=160.0)
    ap.add_argument('--log-dir')
    ap.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    args = ap.parse_args(argv)

    return AppConfig(
        render=RenderConfig(pixels_per_beat=args.pixels_per_beat),
        audio=AudioConfig(waveform=args.waveform, volume=args.volume),
        playback=PlaybackConfig(bpm=args.bpm),
        log=LogConfig(log_dir=args.log_dir, level=args.log_level),
        script_path=args.script,
        ghost_song=args.ghost,
        midi_in=args.midi_in,
    )

def main(argv=None):
    cfg = build_config(argv)
    setup_crashlog(cfg.log.log_dir)
    _init_logging(cfg.log)
    logging.info("應用程式啟動")

    from app import App
    App(cfg).run()

if __name__ == '__main__':
    try:
        main()
    except Exception as e:
        try:
            log_exception("Top-level exception", e)
        except OSError:
            pass
        logging.error("未捕捉的例外：%s", e, exc_info=True)
        print("程式發生錯誤，請到 logs/ 資料夾看 app.log 與 error-*.txt")
        traceback.print_exc()

"""
Progressive Mandelbrot renderer, command-line front end.

Renders one view coarse-to-fine with a progress bar over the passes.
"""

import argparse
import logging
import os
import threading
import time
from dataclasses import replace

from tqdm import tqdm

from progressive_mandelbrot.config import load_render_config, pass_schedule
from progressive_mandelbrot.display import ImageSurface
from progressive_mandelbrot.model import DEFAULT_CENTER_X, DEFAULT_CENTER_Y, DEFAULT_SCALE, RenderRequest
from progressive_mandelbrot.navigation import (
    AUTO,
    cap_mode_from_query,
    parse_cap_mode,
    request_from_query,
    request_to_query,
    resolve_cap,
)
from progressive_mandelbrot.orchestrator import RenderOrchestrator


def monitor_passes(orchestrator, total_passes, done):
    """
    Background thread for the tqdm pass bar.
    """
    pbar = tqdm(total=total_passes, desc="Refining", unit="pass",
                bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} passes [{elapsed}<{remaining}]')

    last_completed = 0
    while last_completed < total_passes and not done.is_set():
        status = orchestrator.status()
        current_completed = total_passes if status.complete else status.pass_index
        if current_completed > last_completed:
            pbar.update(current_completed - last_completed)
            last_completed = current_completed
        time.sleep(0.05)

    pbar.close()


def render_progressive(request, width=1280, height=720, config=None, timeout=None):
    """
    Render one view through every refinement pass.

    Parameters:
    -----------
    request : RenderRequest
        Centre, scale and iteration cap.
    width, height : int
        Viewport dimensions in pixels
    config : RenderConfig, optional
        Pass schedule and worker count (environment defaults otherwise)
    timeout : float, optional
        Give up waiting after this many seconds

    Returns:
    --------
    (ImageSurface, float, bool)
        The surface holding the image, render time, and whether it finished
    """
    config = config or load_render_config()
    surface = ImageSurface(width, height)
    total_passes = len(pass_schedule(config.initial_step, config.last_step))

    with RenderOrchestrator(surface, config) as orchestrator:
        done = threading.Event()
        monitor_thread = threading.Thread(target=monitor_passes,
                                          args=(orchestrator, total_passes, done))
        monitor_thread.daemon = True

        start_time = time.time()
        orchestrator.start(request)
        monitor_thread.start()
        finished = orchestrator.wait(timeout)
        render_time = time.time() - start_time

        done.set()
        monitor_thread.join(timeout=1.0)

    return surface, render_time, finished


def build_parser():
    parser = argparse.ArgumentParser(description='Progressive multi-pass Mandelbrot renderer')
    parser.add_argument('--width', type=int, default=1280)
    parser.add_argument('--height', type=int, default=720)
    parser.add_argument('--center-x', type=float, default=None, help=f'Plane x at the viewport centre (default {DEFAULT_CENTER_X})')
    parser.add_argument('--center-y', type=float, default=None, help=f'Plane y at the viewport centre (default {DEFAULT_CENTER_Y})')
    parser.add_argument('--scale', type=float, default=None, help=f'Plane units across the viewport width (default {DEFAULT_SCALE})')
    parser.add_argument('--max-iter', default=None, help="Iteration cap, or 'auto' to derive it from the scale")
    parser.add_argument('--query', default=os.getenv('PROGRESSIVE_MANDELBROT_QUERY', ''),
                        help='Link parameters, e.g. "centerX=-0.75&centerY=0.1&scale=0.05&maxIterations=auto"')
    parser.add_argument('--initial-step', type=float, default=None, help='Coarsest block size (power of 2)')
    parser.add_argument('--last-step', type=float, default=None, help='Finest block size; below 1 anti-aliases')
    parser.add_argument('--workers', type=int, default=None)
    parser.add_argument('--timeout', type=float, default=None, help='Seconds to wait before giving up')
    parser.add_argument('--show', action='store_true', help='Open the finished image in a viewer')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable DEBUG logging')
    return parser


def request_from_args(args):
    cap_mode = cap_mode_from_query(args.query)
    if args.max_iter is not None:
        cap_mode = parse_cap_mode(args.max_iter, cap_mode)
    base = request_from_query(args.query, cap_mode)
    request = RenderRequest(
        args.center_x if args.center_x is not None else base.center_x,
        args.center_y if args.center_y is not None else base.center_y,
        args.scale if args.scale is not None else base.scale,
        base.max_iter,
    ).normalized()
    return replace(request, max_iter=resolve_cap(cap_mode, request.scale)), cap_mode


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    config = load_render_config()
    overrides = {}
    if args.initial_step is not None:
        overrides['initial_step'] = args.initial_step
    if args.last_step is not None:
        overrides['last_step'] = args.last_step
    if args.workers is not None:
        overrides['num_workers'] = args.workers
    if overrides:
        config = replace(config, **overrides).normalized()

    request, cap_mode = request_from_args(args)

    print(f"{'='*60}")
    print(f"PROGRESSIVE MANDELBROT")
    print(f"{'='*60}")
    print(f"Resolution: {args.width}x{args.height}")
    print(f"Center: ({request.center_x:.5f}, {request.center_y:.5f})")
    print(f"Scale: {round(DEFAULT_SCALE / request.scale)}x")
    print(f"Iterations: {request.max_iter}{' (auto)' if cap_mode == AUTO else ''}")
    print(f"Steps: {config.initial_step:g} -> {config.last_step:g} on {config.num_workers} workers")
    print(f"{'='*60}")

    surface, render_time, finished = render_progressive(request, args.width, args.height,
                                                        config, args.timeout)

    megapixels = (args.width * args.height) / 1e6
    speed = megapixels / render_time if render_time > 0 else 0
    print(f"\n{'RENDER COMPLETE!' if finished else 'RENDER TIMED OUT'}")
    print(f"Time: {render_time:.2f} seconds")
    print(f"Speed: {speed:.2f} MPix/sec")
    print(f"Frames presented: {surface.frames}")
    print(f"Link: ?{request_to_query(request, cap_mode)}")
    print(f"{'='*60}")

    if args.show:
        surface.snapshot().show()
    return 0 if finished else 1

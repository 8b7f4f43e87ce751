"""
Experiment Logger - Track simulation runs and cache their trajectories.

Each (filter, configuration) pair is cached as a compressed .npz file and
recorded as one row of a CSV log, so experiment scripts can mix cached and
fresh runs.
"""
import csv
import hashlib
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


class ExperimentLogger:
    """
    Logger for simulation runs of the belief filters.

    Usage:
        exp_logger = ExperimentLogger(experiment_name='particle_walk_2d')
        config = {'problem': 'random_walk_2d', 'n_steps': 30,
                  'n_particles': 1000, 'seed': 228}

        if exp_logger.run_exists('particle', **config):
            data = exp_logger.load_run('particle', **config)
        else:
            result = run_simulation(...)
            exp_logger.save_run('particle', config, result.to_arrays(),
                                metrics={'final_error': ...})

        run_dir = exp_logger.create_timestamped_run_dir()
    """

    LOG_COLUMNS = [
        'timestamp', 'experiment_name', 'filter', 'problem',
        'n_steps', 'n_particles', 'lam', 'seed',
        'final_error', 'coverage', 'runtime_sec',
        'cache_file', 'status', 'notes'
    ]

    # Config keys that identify a cached run
    CACHE_KEYS = ['problem', 'n_steps', 'n_particles', 'lam', 'seed']

    def __init__(self, experiment_name: Optional[str] = None, results_root: Optional[str] = None):
        """
        Initialize experiment logger.

        Parameters
        ----------
        experiment_name : str, optional
            Logs are stored in {results_root}/{experiment_name}/ when given.
        results_root : str, optional
            Root directory for results (default: ./results).
        """
        self._results_root = results_root or os.path.join(os.getcwd(), 'results')
        self.experiment_name = experiment_name

        if experiment_name is not None:
            self.log_dir = os.path.join(self._results_root, experiment_name)
        else:
            self.log_dir = self._results_root

        self.log_file = os.path.join(self.log_dir, 'run_log.csv')
        self.cache_dir = os.path.join(self.log_dir, 'cache')

        os.makedirs(self.cache_dir, exist_ok=True)
        if not os.path.exists(self.log_file):
            with open(self.log_file, 'w', newline='') as f:
                csv.DictWriter(f, fieldnames=self.LOG_COLUMNS).writeheader()

        self._current_run_dir: Optional[str] = None

    def _config_hash(self, filter_name: str, config: Dict) -> str:
        """Short hash of the filter name and identifying config values."""
        key_parts = [filter_name]
        for k in self.CACHE_KEYS:
            if k in config:
                key_parts.append(f"{k}={config[k]}")
        return hashlib.md5("_".join(key_parts).encode()).hexdigest()[:12]

    def get_cache_path(self, filter_name: str, config: Dict) -> str:
        """Full path to the cache file for a filter + config."""
        safe_name = filter_name.replace('(', '_').replace(')', '').replace(' ', '_')
        filename = f"{safe_name}_{self._config_hash(filter_name, config)}.npz"
        return os.path.join(self.cache_dir, filename)

    def run_exists(self, filter_name: str, **config) -> bool:
        """True if a cached run exists for the filter + config."""
        return os.path.exists(self.get_cache_path(filter_name, config))

    def save_run(
        self,
        filter_name: str,
        config: Dict[str, Any],
        data: Dict[str, Any],
        metrics: Optional[Dict[str, float]] = None,
        runtime_sec: float = 0.0,
        notes: str = ''
    ) -> str:
        """
        Cache run arrays and append a row to the CSV log.

        Parameters
        ----------
        filter_name : str
            Filter name (e.g. 'kf', 'particle')
        config : dict
            Run configuration
        data : dict
            Arrays to cache, e.g. {'states': ..., 'means': ...}
        metrics : dict, optional
            Summary metrics {final_error, coverage}
        runtime_sec : float
        notes : str

        Returns
        -------
        str
            Path to saved cache file
        """
        cache_path = self.get_cache_path(filter_name, config)
        np.savez_compressed(cache_path, **data)

        metrics = metrics or {}
        row = {
            'timestamp': datetime.now().strftime('%Y-%m-%d_%H-%M-%S'),
            'experiment_name': self.experiment_name or '',
            'filter': filter_name,
            'problem': config.get('problem', ''),
            'n_steps': config.get('n_steps', ''),
            'n_particles': config.get('n_particles', ''),
            'lam': config.get('lam', ''),
            'seed': config.get('seed', ''),
            'final_error': f"{metrics['final_error']:.4f}" if metrics.get('final_error') is not None else '',
            'coverage': f"{metrics['coverage']:.3f}" if metrics.get('coverage') is not None else '',
            'runtime_sec': f"{runtime_sec:.2f}",
            'cache_file': os.path.basename(cache_path),
            'status': 'completed',
            'notes': notes,
        }

        with open(self.log_file, 'a', newline='') as f:
            csv.DictWriter(f, fieldnames=self.LOG_COLUMNS).writerow(row)

        logger.info("Cached %s: %s", filter_name, os.path.basename(cache_path))
        return cache_path

    def load_run(self, filter_name: str, **config) -> Optional[Dict[str, np.ndarray]]:
        """
        Load a cached run.

        Returns
        -------
        dict or None
            Arrays saved by save_run, or None if nothing is cached.
        """
        cache_path = self.get_cache_path(filter_name, config)
        if not os.path.exists(cache_path):
            return None

        with np.load(cache_path) as npz:
            data = {key: npz[key] for key in npz.files}

        logger.info("Loaded cached %s: %s", filter_name, os.path.basename(cache_path))
        return data

    def get_cached_filters(self, **config) -> List[str]:
        """Filters with a completed, still cached run matching config."""
        cached = []
        with open(self.log_file, 'r', newline='') as f:
            for row in csv.DictReader(f):
                if row.get('status') != 'completed':
                    continue
                if any(k in config and str(row.get(k, '')) != str(config[k]) for k in self.CACHE_KEYS):
                    continue
                cache_file = row.get('cache_file', '')
                if (cache_file and os.path.exists(os.path.join(self.cache_dir, cache_file))
                        and row['filter'] not in cached):
                    cached.append(row['filter'])
        return cached

    def create_timestamped_run_dir(self, timestamp: Optional[str] = None) -> str:
        """
        Create a timestamped directory for figures of the current run.

        Parameters
        ----------
        timestamp : str, optional
            Format: YYYY-MM-DD_HH-MM-SS. Defaults to now.
        """
        if timestamp is None:
            timestamp = datetime.now().strftime('%Y-%m-%d_%H-%M-%S')

        self._current_run_dir = os.path.join(self.log_dir, timestamp)
        os.makedirs(self._current_run_dir, exist_ok=True)
        return self._current_run_dir

    def get_figures_dir(self, create: bool = True) -> str:
        """Get the figures directory for the current run."""
        if self._current_run_dir is None:
            raise RuntimeError("Call create_timestamped_run_dir() first")

        figs_dir = os.path.join(self._current_run_dir, 'figures')
        if create:
            os.makedirs(figs_dir, exist_ok=True)
        return figs_dir

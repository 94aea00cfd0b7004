import logging
import sys

from pathlib import Path
from typing import Optional

import pandas as pd
import typer

from .data import make_dataset
from .grid import check_grid_args
from .path_search import (ElNetPathSearch,
                          PathSearchControl,
                          check_run_args)
from .solver import (SolverControl,
                     _get_solver)
from ._utils import (ConfigurationError,
                     ResourceError,
                     SolverError,
                     _check_dtype,
                     _check_order)
from .info import __version__

app = typer.Typer(help="Elastic net regularization path search")


@app.command()
def version():
    typer.echo(__version__)


def _read_csv(path, dtype):
    df = pd.read_csv(path)
    if df.shape[1] < 2:
        raise ConfigurationError(f'{path} should have at least one feature column and a target column')
    X = df.iloc[:, :-1].to_numpy(dtype=dtype)
    y = df.iloc[:, -1].to_numpy(dtype=dtype)
    return X, y


@app.command()
def run(rows: int = typer.Option(1000, help="Rows of generated data, before the split."),
        features: int = typer.Option(20, help="Columns of generated data."),
        workers: Optional[int] = typer.Option(None, help="Number of workers; defaults to one per device."),
        devices: Optional[int] = typer.Option(None, help="Number of devices; defaults to the CPU count."),
        alphas: int = typer.Option(4, help="Number of alpha values."),
        lambdas: int = typer.Option(20, help="Number of lambda values per alpha."),
        valid_fraction: float = typer.Option(0.2, help="Fraction of rows held out for validation."),
        lambda_min_ratio: float = typer.Option(1e-7, help="Ratio of smallest to largest lambda."),
        precision: str = typer.Option('double', help="'single' or 'double'."),
        order: str = typer.Option('r', help="'r' (row-major) or 'c' (column-major)."),
        seed: int = typer.Option(0, help="Seed for generated data."),
        input_path: Optional[Path] = typer.Option(None, "--input", exists=True, dir_okay=False,
                                             help="CSV file of data; the last column is the target."),
        output: Optional[Path] = typer.Option(None, help="Write the records to this CSV file."),
        solver: str = typer.Option('cd', help="Solver backend, 'cd' or 'sklearn'."),
        progress: bool = typer.Option(False, help="Show a progress bar."),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Log info messages.")):
    """
    Solve an elastic net path and print one line per grid point.
    """
    if verbose:
        logging.basicConfig(level=logging.INFO)

    try:
        dtype = _check_dtype(precision)
        _check_order(order)
        _get_solver(solver)
        if input_path is None:
            check_run_args(rows, alphas, lambdas, valid_fraction, lambda_min_ratio)
        else:
            # row count is only known once the file is read
            check_grid_args(alphas, lambdas, lambda_min_ratio)
            if not 0 <= valid_fraction < 1:
                raise ConfigurationError(f'valid_fraction should be in [0,1), got {valid_fraction}')

        if input_path is None:
            if features < 1:
                raise ConfigurationError(f'features should be at least 1, got {features}')
            X, y = make_dataset(n_samples=rows,
                                n_features=features,
                                random_state=seed,
                                dtype=dtype)[:2]
        else:
            X, y = _read_csv(input_path, dtype)

        typer.echo(f'Rows: {X.shape[0]} Features: {X.shape[1]}', err=True)

        search = ElNetPathSearch(nalpha=alphas,
                                 nlambda=lambdas,
                                 valid_fraction=valid_fraction,
                                 lambda_min_ratio=lambda_min_ratio,
                                 n_workers=workers,
                                 n_devices=devices,
                                 order=order,
                                 dtype=dtype,
                                 solver=solver,
                                 solver_control=SolverControl(logging=verbose),
                                 control=PathSearchControl(logging=verbose,
                                                           progress=progress,
                                                           stream=sys.stdout))
        search.fit(X, y)

    except (ConfigurationError, ResourceError, SolverError, ValueError) as e:
        typer.echo(f'Error: {e}', err=True)
        raise typer.Exit(code=1)

    split = search.split_
    typer.echo('END SOLVE: type 1 mTrain %d n %d mValid %d twall %g tsolve %g' %
               (split.n_train,
                split.n_features,
                split.n_valid,
                search.wall_time_,
                search.solve_time_))

    if output is not None:
        search.summary_.to_csv(output, index=False)


if __name__ == "__main__":
    app()

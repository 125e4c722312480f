"""
Command-line interface for the Responsible ML workflow with subcommands.
"""

import click
import logging
from pathlib import Path

import pandas as pd

from responsible_ml import ResponsibleMLWorkflow, WorkflowConfig
from responsible_ml.core.config import MODEL_KINDS
from responsible_ml.core.data_loader import CovidDataLoader
from responsible_ml.core.explorer import DataExplorer
from responsible_ml.interpretability import Explainer, predict_parts
from responsible_ml.utils.logging_utils import setup_logging
from responsible_ml.utils.model_persistence import ModelPersistence


def _load_config(config):
    return WorkflowConfig.from_file(config) if config else WorkflowConfig()


def _parse_observation(pairs):
    """Turn ('Age=76', 'Gender=Male') into a dict."""
    observation = {}
    for pair in pairs:
        if '=' not in pair:
            raise click.BadParameter(f"Expected key=value, got '{pair}'", param_hint='--obs')
        key, value = pair.split('=', 1)
        observation[key.strip()] = value.strip()
    return observation


@click.group()
def cli():
    """Responsible ML CLI for explainable risk models"""
    pass


@cli.command()
@click.option('--config', default=None, help='Config file path (defaults to built-in settings)')
@click.option('--train', 'train_path', help='Training table (overrides config)')
@click.option('--test', 'test_path', help='Test table (overrides config)')
@click.option('--models', multiple=True, type=click.Choice(MODEL_KINDS), help='Models to fit')
@click.option('--output-dir', help='Override output directory')
@click.option('--skip-tuning', is_flag=True, help='Skip the tuned random forest')
@click.option('--demo', is_flag=True, help='Use synthetic data instead of the configured files')
@click.option('--verbose', is_flag=True, help='Debug logging')
def run(config, train_path, test_path, models, output_dir, skip_tuning, demo, verbose):
    """Run complete workflow"""
    try:
        workflow_config = _load_config(config)

        if train_path:
            workflow_config.data.train_path = train_path
        if test_path:
            workflow_config.data.test_path = test_path
        if output_dir:
            workflow_config.with_output_dir(output_dir)
            click.echo(f"📁 Output directory: {output_dir}")
        if verbose:
            workflow_config.logging.level = logging.DEBUG

        model_types = list(models) if models else list(workflow_config.models.enabled)
        if skip_tuning and 'tuned_forest' in model_types:
            model_types.remove('tuned_forest')
        click.echo(f"🧮 Models: {', '.join(model_types)}")

        workflow = ResponsibleMLWorkflow(config=workflow_config)
        result = workflow.run(models=model_types, use_demo=demo)

        click.echo(result.performance.to_markdown(index=False, floatfmt='.4f'))
        click.echo(f"✅ Workflow completed in {result.duration_seconds:.1f}s. Report: {result.report_path}")

    except Exception as e:
        click.echo(f"❌ Workflow failed: {e}")
        raise


@cli.command()
@click.argument('data_file', required=False)
@click.option('--config', default=None, help='Config file path')
@click.option('--strata', default=None, help='Grouping column (defaults to the target)')
@click.option('--demo', is_flag=True, help='Describe the synthetic training table')
def explore(data_file, config, strata, demo):
    """Print the stratified table of a patient table"""
    try:
        workflow_config = _load_config(config)
        loader = CovidDataLoader(workflow_config.data)
        if demo:
            df = loader.load_demo(seed=workflow_config.models.random_state)
        else:
            df = loader.load_table(data_file or workflow_config.data.train_path)

        explorer = DataExplorer(workflow_config.data)
        summary = explorer.summarize(df)
        click.echo(f"📊 {summary['n_rows']} patients, {summary['n_positive']} with "
                   f"{workflow_config.data.target}={workflow_config.data.positive_label} "
                   f"({summary['outcome_rate']:.2%})")
        click.echo(explorer.stratified_table(df, strata=strata).to_markdown(index=False))
        click.echo()
        click.echo(explorer.outcome_rate_by(df, workflow_config.data.age_column)
                   .to_markdown(index=False, floatfmt='.4f'))

    except Exception as e:
        click.echo(f"❌ Exploration failed: {e}")
        raise


@cli.command(name='demo-data')
@click.option('--output-dir', default='data', help='Directory for the generated files')
@click.option('--rows', default=2000, show_default=True, help='Rows per file')
@click.option('--seed', default=42, show_default=True, help='Random seed')
@click.option('--config', default=None, help='Config file path')
def demo_data(output_dir, rows, seed, config):
    """Write synthetic spring (train) and summer (test) tables"""
    try:
        workflow_config = _load_config(config)
        loader = CovidDataLoader(workflow_config.data)
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        for offset, (period, name) in enumerate((('spring', Path(workflow_config.data.train_path).name),
                                                 ('summer', Path(workflow_config.data.test_path).name))):
            df = loader.load_demo(n=rows, seed=seed + offset, period=period)
            path = loader.write_table(df, out / name)
            click.echo(f"✅ Wrote {len(df)} {period} rows to {path}")

    except Exception as e:
        click.echo(f"❌ Demo data generation failed: {e}")
        raise


@cli.command()
@click.option('--model-dir', required=True, help='Directory of a saved model')
@click.option('--obs', multiple=True, help='Observation value as key=value; unset keys use the configured observation')
@click.option('--config', default=None, help='Config file path')
@click.option('--data', 'data_file', default=None, help='Reference table (defaults to the configured test table)')
@click.option('--demo', is_flag=True, help='Use the synthetic summer table as reference data')
@click.option('--type', 'kind', type=click.Choice(['break_down', 'shap']), default='break_down',
              show_default=True, help='Attribution method')
def explain(model_dir, obs, config, data_file, demo, kind):
    """Attribute one prediction of a saved model to its variables"""
    try:
        workflow_config = _load_config(config)
        setup_logging(log_file_path=workflow_config.output.log_dir, quiet=True)
        loader = CovidDataLoader(workflow_config.data)

        model, metadata, _ = ModelPersistence.load_model(model_dir)
        if demo:
            reference = loader.load_demo(seed=workflow_config.models.random_state + 1, period='summer')
        else:
            reference = loader.load_table(data_file or workflow_config.data.test_path)
        X, y = loader.prepare(reference)

        observation = dict(workflow_config.explanation.new_observation)
        observation.update(_parse_observation(obs))
        encoded = loader.encode_features(observation)

        explainer = Explainer(model, X, y, label=metadata.get('name'))
        parts = predict_parts(explainer, encoded, type=kind,
                              B=workflow_config.explanation.shap_B,
                              background_size=workflow_config.explanation.shap_background,
                              nsamples=workflow_config.explanation.shap_nsamples,
                              random_state=workflow_config.models.random_state)

        click.echo(pd.DataFrame([observation]).to_markdown(index=False))
        click.echo()
        table = parts.result[['variable', 'contribution', 'cumulative']]
        click.echo(table.to_markdown(index=False, floatfmt='.6f'))
        click.echo(f"✅ {explainer.label}: prediction {parts.prediction:.6f} (intercept {parts.intercept:.6f})")

    except Exception as e:
        click.echo(f"❌ Explanation failed: {e}")
        raise


@cli.command()
@click.option('--config', default=None, help='Config file path')
def info(config):
    """Show the effective configuration"""
    try:
        workflow_config = _load_config(config)
        settings = workflow_config.to_dict()

        click.echo("=" * 60)
        click.echo("RESPONSIBLE ML INFORMATION")
        click.echo("=" * 60)

        click.echo("\n📊 DATA CONFIGURATION:")
        click.echo(f"  Train: {settings['data']['train_path']}")
        click.echo(f"  Test: {settings['data']['test_path']}")
        click.echo(f"  Target: {settings['data']['target']} (positive '{settings['data']['positive_label']}')")
        click.echo(f"  Features: {', '.join(settings['data']['features'])}")

        click.echo("\n🎯 MODEL CONFIGURATION:")
        click.echo(f"  Enabled: {', '.join(settings['models']['enabled'])}")
        click.echo(f"  Random State: {settings['models']['random_state']}")
        click.echo(f"  Tuning: n_iter={settings['tuning']['n_iter']}, cv_folds={settings['tuning']['cv_folds']}, "
                   f"scoring={settings['tuning']['scoring']}")

        click.echo("\n🔍 EXPLANATION CONFIGURATION:")
        for key in ('B', 'N', 'grid_points', 'cutoff', 'profile_variables', 'new_observation'):
            click.echo(f"  {key}: {settings['explanation'][key]}")

        click.echo("\n📁 OUTPUT CONFIGURATION:")
        for key, value in settings['output'].items():
            click.echo(f"  {key}: {value}")

        click.echo("\n" + "=" * 60)

    except Exception as e:
        click.echo(f"❌ Failed to load configuration: {e}")
        raise


if __name__ == '__main__':
    cli()

"""
Responsible ML: an explainable modelling workflow for tabular health data.

This is the main orchestrator that coordinates the modular components:
data loading, exploration, model fitting, explainers, performance,
explanation artifacts, plots and the Markdown report.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from tqdm import tqdm

from .exceptions import (
    ResponsibleMLError,
    ConfigurationError,
    DataValidationError,
    ModelNotFittedError,
    ExplanationError,
)

# Import core components
from .core.config import WorkflowConfig, MODEL_KINDS
from .core.data_loader import CovidDataLoader
from .core.explorer import DataExplorer
from .core.evaluator import performance_by_explainer, performance_table, ModelPerformance
from .core.io_utils import slugify
from .core.results_manager import ReportBuilder

# Import model components
from .models.base_model import BaseModel
from .models.model_factory import ModelFactory

# Import interpretability components
from .interpretability import (
    Explainer,
    model_parts,
    model_profile,
    predict_parts,
    predict_profile,
    VariableImportance,
    AggregatedProfiles,
    PredictParts,
    CeterisParibusProfiles,
)

# Import utilities
from .utils.logging_utils import setup_logging, log_execution_time
from .utils.model_persistence import ModelPersistence

# Import visualization components
from .visualization import ExplorationVisualizer, ExplanationVisualizer

logger = logging.getLogger(__name__)

__version__ = "1.0.0"


@dataclass
class WorkflowResult:
    """Everything a run produced, keyed by model label where applicable."""
    models: Dict[str, BaseModel] = field(default_factory=dict)
    explainers: Dict[str, Explainer] = field(default_factory=dict)
    performance: pd.DataFrame = field(default_factory=pd.DataFrame)
    summaries: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    importance: Dict[str, VariableImportance] = field(default_factory=dict)
    profiles: Dict[str, List[AggregatedProfiles]] = field(default_factory=dict)
    break_down: Dict[str, PredictParts] = field(default_factory=dict)
    shap: Dict[str, PredictParts] = field(default_factory=dict)
    ceteris_paribus: Dict[str, CeterisParibusProfiles] = field(default_factory=dict)
    plots: Dict[str, Optional[str]] = field(default_factory=dict)
    report_path: Optional[str] = None
    duration_seconds: float = 0.0


class ResponsibleMLWorkflow:
    """
    Main orchestrator for the responsible modelling workflow.

    The stages run in a fixed order: load_data, explore, fit_models,
    build_explainers, evaluate, explain_global, explain_local, write_report.
    Each stage can also be called on its own; later stages use the state
    left by earlier ones.
    """

    def __init__(self, config_path: Optional[str] = None, config: Optional[Dict[str, Any]] = None,
                 configure_logging: bool = True):
        """
        Initialize the workflow with configuration.

        Args:
            config_path: Path to a JSON configuration file
            config: Configuration dict or WorkflowConfig, used when no path is given
            configure_logging: Install file and console log handlers
        """
        # Path takes precedence, else dict, else defaults
        if config_path:
            self.config = WorkflowConfig.from_file(config_path)
        elif isinstance(config, WorkflowConfig):
            self.config = config
        elif config is not None:
            self.config = WorkflowConfig(config_dict=config)
        else:
            self.config = WorkflowConfig()

        if configure_logging:
            setup_logging(
                log_file_path=self.config.output.log_dir,
                level=self.config.logging.level,
                format_string=self.config.logging.format,
                date_format=self.config.logging.date_format,
            )

        self.data_loader = CovidDataLoader(self.config.data)
        self.explorer = DataExplorer(self.config.data)
        self.model_factory = ModelFactory
        self.model_persistence = ModelPersistence
        self.report = ReportBuilder(self.config.output.results_dir)
        self.exploration_visualizer = ExplorationVisualizer(self.config.output.plots_dir, self.config.data)
        self.explanation_visualizer = ExplanationVisualizer(self.config.output.plots_dir)

        self.train: Optional[pd.DataFrame] = None
        self.test: Optional[pd.DataFrame] = None
        self.result = WorkflowResult()

        logger.info(f"ResponsibleMLWorkflow initialized: {self.config!r}")

    # ------------------------------------------------------------------ data

    @log_execution_time
    def load_data(self, use_demo: bool = False, demo_rows: int = 2000) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """
        Load the training and test tables.

        Args:
            use_demo: Use the synthetic spring/summer tables instead of the configured files
            demo_rows: Rows per synthetic table

        Returns:
            Tuple of (train, test)
        """
        if use_demo:
            logger.info(f"Using synthetic demo data with {demo_rows} rows per period")
            seed = self.config.models.random_state
            self.train = self.data_loader.load_demo(n=demo_rows, seed=seed, period='spring')
            self.test = self.data_loader.load_demo(n=demo_rows, seed=seed + 1, period='summer')
        else:
            self.train, self.test = self.data_loader.load_train_test()
        return self.train, self.test

    def _require_data(self) -> None:
        if self.train is None or self.test is None:
            raise ResponsibleMLError("No data loaded; call load_data() first")

    @log_execution_time
    def explore(self) -> Dict[str, Any]:
        """Summaries, the stratified table and the exploration plots."""
        self._require_data()
        for name, frame in (('train', self.train), ('test', self.test)):
            self.result.summaries[name] = self.explorer.summarize(frame)

        table = self.explorer.stratified_table(self.train)
        age_rates = self.explorer.outcome_rate_by(self.train, self.config.data.age_column)
        self.report.save_artifact('stratified_table', table)
        self.report.save_artifact('outcome_rate_by_age', age_rates)

        plots = {
            'age_distribution': self.exploration_visualizer.plot_age_distribution(self.train),
            'prevalence': self.exploration_visualizer.plot_comorbidity_prevalence(self.train),
            'outcome_rate_age': self.exploration_visualizer.plot_outcome_rate(age_rates, self.config.data.age_column),
        }
        self.result.plots.update(plots)

        train_summary = self.result.summaries['train']
        test_summary = self.result.summaries['test']
        self.report.add_section('Data')
        self.report.add_text(
            f"The training table has {train_summary['n_rows']} patients with an outcome rate of "
            f"{train_summary['outcome_rate']:.2%}. The test table has {test_summary['n_rows']} patients "
            f"with an outcome rate of {test_summary['outcome_rate']:.2%}."
        )
        self.report.add_table(table, caption=f"Training data stratified by {self.config.data.target}")
        self.report.add_table(age_rates, caption=f"{self.config.data.target} rate by age")
        for caption, path in plots.items():
            self.report.add_image(path, caption.replace('_', ' '))
        return {'table': table, 'age_rates': age_rates, 'summaries': self.result.summaries}

    # ---------------------------------------------------------------- models

    @log_execution_time
    def fit_models(self, models: Optional[List[str]] = None) -> Dict[str, BaseModel]:
        """
        Create and fit the enabled models on the training table.

        Args:
            models: Model types to fit; defaults to the configuration's enabled list

        Returns:
            Mapping of model label to fitted model
        """
        self._require_data()
        model_types = list(models) if models is not None else list(self.config.models.enabled)
        unknown = [m for m in model_types if not self.model_factory.is_model_available(m)]
        if unknown:
            raise ConfigurationError(f"Unknown model types {unknown}. Available: {list(MODEL_KINDS)}")

        X_train, y_train = self.data_loader.prepare(self.train)
        self.result.models = {}
        for model_type in model_types:
            model = self.model_factory.create_from_config(model_type, self.config)
            start = time.time()
            train_metrics = model.train(X_train, y_train)
            logger.info(f"Fitted '{model.name}' in {time.time() - start:.2f}s: {train_metrics}")
            self.result.models[model.name] = model

            if self.config.output.save_models:
                self.model_persistence.save_model(
                    model, Path(self.config.output.models_dir) / slugify(model.name), metrics=train_metrics)

        tree = next((m for m in self.result.models.values() if hasattr(m, 'export_text')), None)
        if tree is not None:
            self.result.plots['decision_tree'] = self.explanation_visualizer.plot_decision_tree(tree)
        return self.result.models

    @log_execution_time
    def build_explainers(self, on: str = 'test') -> Dict[str, Explainer]:
        """Wrap every fitted model in an Explainer over the test (or train) table."""
        self._require_data()
        if not self.result.models:
            raise ModelNotFittedError("No fitted models; call fit_models() first")
        frame = self.test if on == 'test' else self.train
        X, y = self.data_loader.prepare(frame)
        self.result.explainers = {
            label: Explainer(model, X, y, label=label)
            for label, model in self.result.models.items()
        }
        return self.result.explainers

    def _require_explainers(self) -> List[Explainer]:
        if not self.result.explainers:
            raise ResponsibleMLError("No explainers; call build_explainers() first")
        return list(self.result.explainers.values())

    # ----------------------------------------------------------- evaluation

    @log_execution_time
    def evaluate(self) -> pd.DataFrame:
        """Performance table on the test table plus ROC and lift plots."""
        explainers = self._require_explainers()
        cutoff = self.config.explanation.cutoff
        performances: Dict[str, ModelPerformance] = performance_by_explainer(explainers, cutoff=cutoff)
        table = performance_table(list(performances.values()), output_dir=self.config.output.results_dir)
        self.result.performance = table
        self.report.save_artifact('performance', table)

        self.result.plots['roc'] = self.explanation_visualizer.plot_roc(list(performances.values()))
        self.result.plots['lift'] = self.explanation_visualizer.plot_lift(list(performances.values()))

        self.report.add_section('Model performance')
        self.report.add_text(f"Metrics on the test table at cutoff {cutoff}. Models are sorted by AUC.")
        self.report.add_table(table)
        self.report.add_image(self.result.plots['roc'], 'ROC curves')
        self.report.add_image(self.result.plots['lift'], 'Lift curves')
        return table

    # ---------------------------------------------------------- explanations

    @log_execution_time
    def explain_global(self) -> Dict[str, Any]:
        """Permutation importance and dataset-level profiles for every model."""
        explainers = self._require_explainers()
        cfg = self.config.explanation
        seed = self.config.models.random_state

        for explainer in tqdm(explainers, desc='Global explanations'):
            importance = model_parts(explainer, B=cfg.B, N=cfg.N, random_state=seed)
            self.result.importance[explainer.label] = importance
            self.report.save_artifact('importance', importance.result, explainer.label)

            profiles = [
                model_profile(explainer, variables=cfg.profile_variables, N=cfg.profile_N,
                              type=kind, groups=cfg.profile_groups,
                              grid_points=cfg.grid_points, random_state=seed)
                for kind in ('partial', 'accumulated')
            ]
            self.result.profiles[explainer.label] = profiles
            self.report.save_artifact(
                'profile',
                pd.concat([p.result.assign(type=p.type) for p in profiles], ignore_index=True),
                explainer.label)

        self.result.plots['importance'] = self.explanation_visualizer.plot_importance(
            list(self.result.importance.values()))
        for index, kind in enumerate(('partial', 'accumulated')):
            paths = self.explanation_visualizer.plot_all_profiles(
                [profiles[index] for profiles in self.result.profiles.values()], cfg.profile_variables)
            self.result.plots.update({f'profile_{kind}_{v}': p for v, p in paths.items()})

        self.report.add_section('Variable importance')
        self.report.add_text(
            f"Permutation importance with loss 1 - AUC, averaged over {cfg.B} rounds. "
            "Longer bars mean a larger loss after the variable is permuted."
        )
        ranking = pd.DataFrame({label: pd.Series(imp.ranking()) for label, imp in self.result.importance.items()})
        self.report.add_table(ranking, caption='Variables ranked by importance', index=True)
        self.report.add_image(self.result.plots['importance'], 'Variable importance')

        self.report.add_section('Partial dependence')
        for key, path in self.result.plots.items():
            if key.startswith('profile_'):
                self.report.add_image(path, key.replace('_', ' '))
        return {'importance': self.result.importance, 'profiles': self.result.profiles}

    def new_observation(self, observation: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
        """Encode an observation given with display labels; defaults to the configured one."""
        return self.data_loader.encode_features(observation or self.config.explanation.new_observation)

    @log_execution_time
    def explain_local(self, observation: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Break-down, Shapley values and ceteris-paribus profiles for one observation."""
        explainers = self._require_explainers()
        cfg = self.config.explanation
        seed = self.config.models.random_state
        encoded = self.new_observation(observation)

        for explainer in explainers:
            bd = predict_parts(explainer, encoded, type='break_down', random_state=seed)
            sv = predict_parts(explainer, encoded, type='shap', B=cfg.shap_B,
                               background_size=cfg.shap_background, nsamples=cfg.shap_nsamples,
                               random_state=seed)
            cp = predict_profile(explainer, encoded, variables=cfg.profile_variables,
                                 grid_points=cfg.grid_points)
            self.result.break_down[explainer.label] = bd
            self.result.shap[explainer.label] = sv
            self.result.ceteris_paribus[explainer.label] = cp

            self.report.save_artifact('break_down', bd.result, explainer.label)
            self.report.save_artifact('shap', sv.result, explainer.label)
            self.report.save_artifact('ceteris_paribus', cp.result, explainer.label)

            self.result.plots[f'break_down_{explainer.label}'] = self.explanation_visualizer.plot_break_down(bd)
            self.result.plots[f'shap_{explainer.label}'] = self.explanation_visualizer.plot_shap(sv)

        for variable in cfg.profile_variables:
            self.result.plots[f'ceteris_paribus_{variable}'] = self.explanation_visualizer.plot_ceteris_paribus(
                list(self.result.ceteris_paribus.values()), variable)

        shown = self.data_loader.decode_features(encoded)
        self.report.add_section('Explaining a single patient')
        self.report.add_table(shown, caption='Observation')
        predictions = pd.DataFrame({
            'model': list(self.result.break_down),
            'prediction': [bd.prediction for bd in self.result.break_down.values()],
        })
        self.report.add_table(predictions, floatfmt='.6f')
        for label in self.result.break_down:
            self.report.add_section(label, level=3)
            self.report.add_image(self.result.plots.get(f'break_down_{label}'), f'Break-down for {label}')
            self.report.add_image(self.result.plots.get(f'shap_{label}'), f'Shapley values for {label}')
        for variable in cfg.profile_variables:
            self.report.add_image(self.result.plots.get(f'ceteris_paribus_{variable}'),
                                  f'Ceteris-paribus profile of {variable}')
        return {'break_down': self.result.break_down, 'shap': self.result.shap,
                'ceteris_paribus': self.result.ceteris_paribus}

    def write_report(self) -> str:
        self.report.save_json('config', self.config.to_dict())
        self.result.report_path = self.report.write('report.md')
        return self.result.report_path

    # ------------------------------------------------------------------ run

    def run(self, models: Optional[List[str]] = None, use_demo: bool = False,
            demo_rows: int = 2000) -> WorkflowResult:
        """
        Run the complete workflow.

        Args:
            models: Model types to fit; defaults to the configuration's enabled list
            use_demo: Use synthetic data instead of the configured files
            demo_rows: Rows per synthetic table

        Returns:
            WorkflowResult
        """
        start = time.time()
        logger.info(f"Starting workflow run at {datetime.now().isoformat(timespec='seconds')}")

        self.load_data(use_demo=use_demo, demo_rows=demo_rows)
        self.explore()
        self.fit_models(models)
        self.build_explainers()
        self.evaluate()
        self.explain_global()
        self.explain_local()
        self.write_report()

        self.result.duration_seconds = time.time() - start
        logger.info(f"Workflow finished in {self.result.duration_seconds:.1f}s; report at {self.result.report_path}")
        return self.result


def create_workflow(config_path: Optional[str] = None) -> ResponsibleMLWorkflow:
    """Create a ResponsibleMLWorkflow from an optional configuration file."""
    return ResponsibleMLWorkflow(config_path=config_path)


__all__ = [
    'ResponsibleMLWorkflow',
    'WorkflowResult',
    'create_workflow',
    'WorkflowConfig',
    'CovidDataLoader',
    'DataExplorer',
    'ReportBuilder',
    'ModelFactory',
    'ModelPersistence',
    'Explainer',
    'ExplorationVisualizer',
    'ExplanationVisualizer',
    'ResponsibleMLError',
    'ConfigurationError',
    'DataValidationError',
    'ModelNotFittedError',
    'ExplanationError',
]

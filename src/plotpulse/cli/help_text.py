EXPLANATIONS = {
    "kinds": (
        "Kinds lists the diagnostic chart kinds and the model families each one supports. "
        "Numbered diagnostics (residual through cooks_leverage) need statistics that only "
        "statsmodels families provide; partial_dependence needs a random forest and "
        "decision_boundary an SVM."
    ),
    "plot": (
        "Plot fits a model to a tabular dataset and renders one diagnostic chart. "
        "statsmodels families (linear, glm, mixed) are fit from a formula built from "
        "--response and --features unless --formula is given. scikit-learn families "
        "(random_forest, svm, decision_tree) are fit on the --features columns. "
        "Static charts are written as PDF with --save-path; interactive charts can be "
        "written as HTML with --html."
    ),
}

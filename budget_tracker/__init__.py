"""Console front end for the budget tracker."""

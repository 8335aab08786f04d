"""Flask front end for the budget tracker."""

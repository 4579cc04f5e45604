"""Infrastructure helpers shared by the domain and orchestration layers."""

from .categories import CategoryInfo, load_categories
from .config import PolicyConfig, get_policy_config
from .loader import PolicyFileError, load_rule_file, load_rules
from .store import PolicySnapshot, PolicyStore

"""Example: Generating enemy routes for a level

This script builds a route for a few levels, shows how a failing request is
recovered with a fallback path, and renders a sheet of preview variations
with Pillow. The sheet is saved to disk by passing save=True.
"""
import asyncio
import json
import os

from towerpath import GenerationRequest, GeneratorConfig, PathGenerationEngine
from towerpath.visualization import save_preview_sheet

out_dir = '.towerpath_out/examples'
os.makedirs(out_dir, exist_ok=True)

engine = PathGenerationEngine(800, 600, config=GeneratorConfig.diagnostic(), verbose=True)

# One seeded route per level; the same seed always gives the same route
for level_id in (1, 2, 6, 15):
    path = engine.generate(GenerationRequest(level_id, seed=12345))
    meta = path.metadata
    print(f"Level {level_id}: {len(path)} points, {meta.total_length:.0f}px, "
          f"mode={meta.path_mode.value}, tier={meta.fallback_tier.value}, "
          f"score={path.validation.balance_score:.2f}")

# Unknown theme: logged, default theme used
path = engine.generate(GenerationRequest(3, seed=7, theme="lava"))
print("Theme used for 'lava':", path.metadata.theme_name)

# Invalid mode: logged, simple fallback path returned
path = engine.generate(GenerationRequest(3, seed=7, path_mode="sideways"))
print("Fallback tier for invalid mode:", path.fallback_tier.value)

# Async generation with progress reports
def on_progress(update):
    print(f"  {update.stage:<15}{update.percent:5.0f}%  {update.message}")

asyncio.run(engine.generate_async(GenerationRequest(5, seed=99), on_progress))

# Designer previews and a pass/fail summary
previews = engine.generate_previews(4, variation_count=3)
summary = engine.test_level_generation(4)
print(f"Level 4 tests: {summary.passed_tests}/{summary.total_tests} passed")
for rec in summary.recommendations:
    print(f"  [{rec.priority}] {rec.message}")

filename = os.path.join(out_dir, 'level_4_previews.png')
save_preview_sheet(previews, filename, canvas_size=(800, 600), save=True)
print('Saved preview sheet to', filename)

with open(os.path.join(out_dir, 'diagnostics.json'), 'w') as f:
    json.dump(engine.export_diagnostics(), f, indent=2)
engine.close()

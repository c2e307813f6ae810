"""Interactive HTML report generator with sort, filter and drill-down"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Template

from ..core.interfaces import IReportGenerator
from ..core.models import ComplianceResult, ProviderReport, ProviderTag, UsageBand
from ..utils.logger import setup_logger


def report_to_dict(report: ProviderReport) -> Dict[str, Any]:
    """Plain-data view of a report, shared by the HTML and JSON outputs"""

    return {
        'title': report.title,
        'generated_at': report.generated_at.isoformat(),
        'summary': {
            'total_subscriptions': report.total_subscriptions,
            'failed_subscriptions': len(report.failed_subscriptions),
            'total_providers': len(report.providers),
            'control_plane_providers': report.control_plane_count,
            'data_plane_providers': report.data_plane_count,
            'total_resources': report.total_resources,
            'usage_bands': report.usage_band_distribution(),
        },
        'providers': [
            {
                'namespace': p.namespace,
                'registered_count': p.registered_count,
                'subscriptions_with_resources': p.subscriptions_with_resources,
                'total_resources': p.total_resources,
                'percentage': p.percentage,
                'plane': p.plane,
                'usage_band': p.usage_band.value,
                'auto_registered': p.has_tag(ProviderTag.AUTO_REGISTERED),
                'deprecated': p.has_tag(ProviderTag.DEPRECATED),
                'categories': p.categories,
                'labels': sorted(p.labels),
                'subscription_ids': list(p.subscription_ids),
            }
            for p in report.providers
        ],
        'subscriptions': [
            {
                'id': s.subscription_id,
                'name': s.subscription_name,
                'registered_provider_count': s.registered_provider_count,
                'providers_with_resources_count': s.providers_with_resources_count,
                'total_resource_count': s.total_resource_count,
                'registered_namespaces': list(s.registered_namespaces),
                'not_registered_namespaces': list(s.not_registered_namespaces) if report.include_unregistered else [],
            }
            for s in report.subscriptions
        ],
        'required_compliance': _compliance_to_dict(report.required_compliance),
        'recommended_compliance': _compliance_to_dict(report.recommended_compliance),
        'failed_subscriptions': [
            {'id': f.subscription_id, 'name': f.subscription_name, 'error': f.error}
            for f in report.failed_subscriptions
        ],
        'include_unregistered': report.include_unregistered,
    }


def _compliance_to_dict(result: Optional[ComplianceResult]) -> Optional[Dict[str, Any]]:
    if result is None:
        return None
    return {
        'required': list(result.required),
        'found': list(result.found),
        'missing': list(result.missing),
        'compliance_percentage': result.compliance_percentage,
    }


def export_report_json(report: ProviderReport, output_path: str) -> str:
    """Write the report dataset as JSON"""
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(report_to_dict(report), f, indent=2)
    return str(output_file.absolute())


class ReportGenerator(IReportGenerator):
    """Generate a single self-contained HTML provider report"""

    def __init__(self):
        self.logger = setup_logger(self.__class__.__name__)

    def generate_report(self, report: ProviderReport, output_path: str) -> str:
        """Render the report and return the absolute path of the HTML file"""

        data = report_to_dict(report)
        template = Template(self._get_report_template())

        rendered_html = template.render(
            report_data=json.dumps(data).replace("</", "<\\/"),
            title=report.title,
            summary=data['summary'],
            required=report.required_compliance,
            recommended=report.recommended_compliance,
            failed=report.failed_subscriptions,
            usage_bands=[band.value for band in UsageBand],
            timestamp=report.generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip(),
        )

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(rendered_html)

        self.logger.info(f"Provider report generated: {output_path}")
        return str(output_file.absolute())

    def _get_report_template(self) -> str:
        """Get the HTML template for the report"""

        return '''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title|e }}</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
            background: linear-gradient(135deg, #0f4c81 0%, #3a7bd5 100%);
            min-height: 100vh; color: #333;
        }
        .header {
            background: rgba(255, 255, 255, 0.95); padding: 2rem;
            box-shadow: 0 8px 32px rgba(0, 0, 0, 0.1); margin-bottom: 2rem;
        }
        .header h1 { color: #2c3e50; font-size: 2.2rem; margin-bottom: 0.5rem; text-align: center; }
        .header .generated { text-align: center; color: #666; font-size: 0.9rem; }
        .header-stats {
            display: grid; grid-template-columns: repeat(auto-fit, minmax(170px, 1fr));
            gap: 1.5rem; margin-top: 1.5rem;
        }
        .header-stat {
            text-align: center; padding: 1rem; background: linear-gradient(45deg, #f8f9fa, #e9ecef);
            border-radius: 8px; border-left: 4px solid #0078d4;
        }
        .header-stat-value { font-size: 2rem; font-weight: bold; color: #2c3e50; margin-bottom: 0.5rem; }
        .header-stat-label { color: #666; font-size: 0.85rem; text-transform: uppercase; letter-spacing: 1px; }
        .main-container { max-width: 1400px; margin: 0 auto; padding: 0 2rem 2rem 2rem; }
        .card {
            background: rgba(255, 255, 255, 0.95); border-radius: 12px;
            box-shadow: 0 8px 32px rgba(0, 0, 0, 0.1); overflow: hidden; margin-bottom: 2rem;
        }
        .section-header {
            padding: 1.2rem 1.5rem; background: linear-gradient(45deg, #0078d4, #5c2d91);
            color: white; font-size: 1.3rem; font-weight: 600;
        }
        .section-body { padding: 1.5rem; }
        .compliance-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(320px, 1fr)); gap: 1.5rem; }
        .compliance-score { font-size: 2.4rem; font-weight: bold; }
        .score-good { color: #28a745; } .score-warn { color: #fd7e14; } .score-bad { color: #dc3545; }
        .progress { height: 10px; background: #e9ecef; border-radius: 5px; overflow: hidden; margin: 0.5rem 0 1rem 0; }
        .progress-fill { height: 100%; background: linear-gradient(90deg, #dc3545, #fd7e14, #28a745); }
        .chip-list { display: flex; flex-wrap: wrap; gap: 0.4rem; margin-top: 0.4rem; }
        .chip { padding: 0.2rem 0.6rem; border-radius: 10px; font-size: 0.8rem; background: #e9ecef; }
        .chip-found { background: #d4edda; color: #155724; }
        .chip-missing { background: #f8d7da; color: #721c24; }
        .filters {
            padding: 1rem 1.5rem; background: #f8f9fa; border-bottom: 1px solid #e9ecef;
            display: flex; gap: 1rem; flex-wrap: wrap;
        }
        .filter-group { display: flex; flex-direction: column; gap: 0.25rem; }
        .filter-label { font-size: 0.8rem; color: #666; text-transform: uppercase; letter-spacing: 1px; }
        .filter-select, .filter-input { padding: 0.5rem; border: 1px solid #ddd; border-radius: 6px; font-size: 0.9rem; }
        .table-container { overflow-x: auto; max-height: 700px; }
        table { width: 100%; border-collapse: collapse; background: white; }
        th {
            background: #f8f9fa; padding: 0.9rem; text-align: left; font-weight: 600; color: #495057;
            border-bottom: 2px solid #dee2e6; position: sticky; top: 0; z-index: 10; cursor: pointer;
        }
        td { padding: 0.8rem 0.9rem; border-bottom: 1px solid #e9ecef; vertical-align: middle; }
        tr.row:hover { background-color: #f8f9fa; }
        tr.subscription-row { cursor: pointer; }
        tr.detail-row td { background: #fbfcfd; }
        .badge {
            display: inline-block; padding: 0.2rem 0.6rem; border-radius: 12px; font-size: 0.75rem;
            font-weight: 600; text-transform: uppercase; letter-spacing: 0.5px; margin: 0.1rem;
        }
        .band-widely-used { background: #0078d4; color: white; }
        .band-common { background: #28a745; color: white; }
        .band-moderate { background: #ffc107; color: #333; }
        .band-specialized { background: #6c757d; color: white; }
        .plane-control { background: #5c2d91; color: white; }
        .plane-data { background: #17a2b8; color: white; }
        .tag-auto { background: #e2e3e5; color: #383d41; }
        .tag-deprecated { background: #dc3545; color: white; }
        .tag-category { background: #e7f1fb; color: #0b5394; }
        .errors li { padding: 0.4rem 0; color: #dc3545; list-style: none; }
        .empty { padding: 1.5rem; color: #666; text-align: center; }
        @media (max-width: 768px) {
            .header { padding: 1rem; }
            .header h1 { font-size: 1.6rem; }
            .filters { flex-direction: column; }
        }
    </style>
</head>
<body>
    <div class="header">
        <h1>{{ title|e }}</h1>
        <div class="generated">Generated {{ timestamp }}</div>
        <div class="header-stats">
            <div class="header-stat">
                <div class="header-stat-value">{{ summary.total_subscriptions }}</div>
                <div class="header-stat-label">Subscriptions</div>
            </div>
            <div class="header-stat">
                <div class="header-stat-value">{{ summary.total_providers }}</div>
                <div class="header-stat-label">Registered Providers</div>
            </div>
            <div class="header-stat">
                <div class="header-stat-value">{{ summary.data_plane_providers }}</div>
                <div class="header-stat-label">Data Plane</div>
            </div>
            <div class="header-stat">
                <div class="header-stat-value">{{ summary.control_plane_providers }}</div>
                <div class="header-stat-label">Control Plane</div>
            </div>
            <div class="header-stat">
                <div class="header-stat-value">{{ summary.total_resources }}</div>
                <div class="header-stat-label">Resources</div>
            </div>
            {% if required %}
            <div class="header-stat">
                <div class="header-stat-value">{{ "%.1f"|format(required.compliance_percentage) }}%</div>
                <div class="header-stat-label">Baseline Compliance</div>
            </div>
            {% endif %}
        </div>
    </div>

    <div class="main-container">
        {% if failed %}
        <div class="card">
            <div class="section-header">Subscriptions excluded from this report</div>
            <div class="section-body">
                <ul class="errors">
                    {% for f in failed %}
                    <li>{{ f.subscription_name|e }} ({{ f.subscription_id|e }}): {{ f.error|e }}</li>
                    {% endfor %}
                </ul>
            </div>
        </div>
        {% endif %}

        <div class="card">
            <div class="section-header">Landing Zone Baseline</div>
            <div class="section-body compliance-grid">
                {% for label, result in [("Required providers", required), ("Recommended providers", recommended)] %}
                {% if result %}
                {% set score = result.compliance_percentage %}
                <div>
                    <h3>{{ label }}</h3>
                    <div class="compliance-score {{ 'score-good' if score >= 90 else ('score-warn' if score >= 60 else 'score-bad') }}">{{ "%.1f"|format(score) }}%</div>
                    <div class="progress"><div class="progress-fill" style="width: {{ score }}%"></div></div>
                    <div>{{ result.found|length }} of {{ result.required|length }} registered in at least one subscription</div>
                    {% if result.missing %}
                    <div class="filter-label" style="margin-top: 0.8rem;">Missing</div>
                    <div class="chip-list">
                        {% for ns in result.missing %}<span class="chip chip-missing">{{ ns|e }}</span>{% endfor %}
                    </div>
                    {% endif %}
                    {% if result.found %}
                    <div class="filter-label" style="margin-top: 0.8rem;">Found</div>
                    <div class="chip-list">
                        {% for ns in result.found %}<span class="chip chip-found">{{ ns|e }}</span>{% endfor %}
                    </div>
                    {% endif %}
                </div>
                {% endif %}
                {% endfor %}
            </div>
        </div>

        <div class="card">
            <div class="section-header">Provider Usage Matrix</div>
            <div class="filters">
                <div class="filter-group">
                    <div class="filter-label">Search</div>
                    <input type="text" class="filter-input" id="searchFilter" placeholder="Provider namespace..." onkeyup="filterProviders()">
                </div>
                <div class="filter-group">
                    <div class="filter-label">Usage Band</div>
                    <select class="filter-select" id="bandFilter" onchange="filterProviders()">
                        <option value="">All Bands</option>
                        {% for band in usage_bands %}
                        <option value="{{ band }}">{{ band }} ({{ summary.usage_bands[band] }})</option>
                        {% endfor %}
                    </select>
                </div>
                <div class="filter-group">
                    <div class="filter-label">Plane</div>
                    <select class="filter-select" id="planeFilter" onchange="filterProviders()">
                        <option value="">All</option>
                        <option value="data">Data plane</option>
                        <option value="control">Control plane</option>
                    </select>
                </div>
                <div class="filter-group">
                    <div class="filter-label">Category</div>
                    <select class="filter-select" id="categoryFilter" onchange="filterProviders()">
                        <option value="">All Categories</option>
                    </select>
                </div>
                <div class="filter-group">
                    <div class="filter-label">Flags</div>
                    <select class="filter-select" id="flagFilter" onchange="filterProviders()">
                        <option value="">Any</option>
                        <option value="auto_registered">Auto-registered</option>
                        <option value="deprecated">Deprecated</option>
                    </select>
                </div>
            </div>
            <div class="table-container">
                <table>
                    <thead>
                        <tr>
                            <th onclick="sortProviders('namespace')">Provider</th>
                            <th onclick="sortProviders('registered_count')">Subscriptions</th>
                            <th onclick="sortProviders('percentage')">Adoption</th>
                            <th onclick="sortProviders('subscriptions_with_resources')">With Resources</th>
                            <th onclick="sortProviders('total_resources')">Resources</th>
                            <th>Classification</th>
                        </tr>
                    </thead>
                    <tbody id="providerTableBody"></tbody>
                </table>
            </div>
        </div>

        <div class="card">
            <div class="section-header">Subscriptions</div>
            <div class="table-container">
                <table>
                    <thead>
                        <tr>
                            <th onclick="sortSubscriptions('name')">Subscription</th>
                            <th onclick="sortSubscriptions('registered_provider_count')">Registered Providers</th>
                            <th onclick="sortSubscriptions('providers_with_resources_count')">Providers In Use</th>
                            <th onclick="sortSubscriptions('total_resource_count')">Resources</th>
                        </tr>
                    </thead>
                    <tbody id="subscriptionTableBody"></tbody>
                </table>
            </div>
        </div>
    </div>

    <script>
        const reportData = {{ report_data|safe }};
        let filteredProviders = [...reportData.providers];
        let subscriptions = [...reportData.subscriptions];
        const sortState = {};
        let lastProviderSort = null;

        document.addEventListener('DOMContentLoaded', function() {
            populateCategories();
            renderProviders();
            renderSubscriptions();
        });

        function escapeHtml(value) {
            return String(value).replace(/[&<>"']/g, c => ({
                '&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;'
            })[c]);
        }

        function populateCategories() {
            const select = document.getElementById('categoryFilter');
            const categories = new Set();
            reportData.providers.forEach(p => p.categories.forEach(c => categories.add(c)));
            [...categories].sort().forEach(c => {
                const option = document.createElement('option');
                option.value = c;
                option.textContent = c;
                select.appendChild(option);
            });
        }

        function providerBadges(p) {
            let html = `<span class="badge band-${p.usage_band}">${p.usage_band}</span>`;
            html += `<span class="badge plane-${p.plane}">${p.plane} plane</span>`;
            if (p.auto_registered) html += '<span class="badge tag-auto">auto-registered</span>';
            if (p.deprecated) html += '<span class="badge tag-deprecated">deprecated</span>';
            p.categories.forEach(c => { html += `<span class="badge tag-category">${escapeHtml(c)}</span>`; });
            return html;
        }

        function renderProviders() {
            const tbody = document.getElementById('providerTableBody');
            tbody.innerHTML = '';
            if (filteredProviders.length === 0) {
                tbody.innerHTML = '<tr><td colspan="6" class="empty">No providers match the current filters.</td></tr>';
                return;
            }
            filteredProviders.forEach(p => {
                const row = document.createElement('tr');
                row.className = 'row';
                row.innerHTML = `
                    <td style="font-weight: 600;">${escapeHtml(p.namespace)}</td>
                    <td>${p.registered_count} / ${reportData.summary.total_subscriptions}</td>
                    <td>
                        <div class="progress" style="width: 120px; margin: 0;"><div class="progress-fill" style="width: ${p.percentage}%"></div></div>
                        <div style="font-size: 0.8rem;">${p.percentage.toFixed(2)}%</div>
                    </td>
                    <td>${p.subscriptions_with_resources}</td>
                    <td>${p.total_resources}</td>
                    <td>${providerBadges(p)}</td>
                `;
                tbody.appendChild(row);
            });
        }

        function filterProviders() {
            const search = document.getElementById('searchFilter').value.toLowerCase();
            const band = document.getElementById('bandFilter').value;
            const plane = document.getElementById('planeFilter').value;
            const category = document.getElementById('categoryFilter').value;
            const flag = document.getElementById('flagFilter').value;

            filteredProviders = reportData.providers.filter(p =>
                (!search || p.namespace.toLowerCase().includes(search)) &&
                (!band || p.usage_band === band) &&
                (!plane || p.plane === plane) &&
                (!category || p.categories.includes(category)) &&
                (!flag || p[flag])
            );
            if (lastProviderSort) {
                filteredProviders.sort(compareBy(lastProviderSort.column, lastProviderSort.descending));
            }
            renderProviders();
        }

        function compareBy(column, descending) {
            return (a, b) => {
                const aVal = a[column];
                const bVal = b[column];
                const result = typeof aVal === 'string' ? aVal.localeCompare(bVal) : aVal - bVal;
                return descending ? -result : result;
            };
        }

        function toggleSort(key) {
            sortState[key] = !sortState[key];
            return sortState[key];
        }

        function sortProviders(column) {
            lastProviderSort = {column: column, descending: toggleSort('providers.' + column)};
            filteredProviders.sort(compareBy(lastProviderSort.column, lastProviderSort.descending));
            renderProviders();
        }

        function sortSubscriptions(column) {
            subscriptions.sort(compareBy(column, toggleSort('subscriptions.' + column)));
            renderSubscriptions();
        }

        function renderSubscriptions() {
            const tbody = document.getElementById('subscriptionTableBody');
            tbody.innerHTML = '';
            if (subscriptions.length === 0) {
                tbody.innerHTML = '<tr><td colspan="4" class="empty">No subscriptions were collected.</td></tr>';
                return;
            }
            subscriptions.forEach((s, index) => {
                const row = document.createElement('tr');
                row.className = 'row subscription-row';
                row.onclick = () => toggleDetails(index);
                row.innerHTML = `
                    <td>
                        <div style="font-weight: 600;">&#9656; ${escapeHtml(s.name)}</div>
                        <div style="font-size: 0.8rem; color: #666;">${escapeHtml(s.id)}</div>
                    </td>
                    <td>${s.registered_provider_count}</td>
                    <td>${s.providers_with_resources_count}</td>
                    <td>${s.total_resource_count}</td>
                `;
                tbody.appendChild(row);

                const detail = document.createElement('tr');
                detail.className = 'detail-row';
                detail.id = `details-${index}`;
                detail.style.display = 'none';
                let html = '<div class="filter-label">Registered providers</div><div class="chip-list">';
                html += s.registered_namespaces.map(ns => `<span class="chip chip-found">${escapeHtml(ns)}</span>`).join('');
                html += '</div>';
                if (reportData.include_unregistered && s.not_registered_namespaces.length > 0) {
                    html += '<div class="filter-label" style="margin-top: 0.8rem;">Not registered</div><div class="chip-list">';
                    html += s.not_registered_namespaces.map(ns => `<span class="chip">${escapeHtml(ns)}</span>`).join('');
                    html += '</div>';
                }
                detail.innerHTML = `<td colspan="4">${html}</td>`;
                tbody.appendChild(detail);
            });
        }

        function toggleDetails(index) {
            const detail = document.getElementById(`details-${index}`);
            detail.style.display = detail.style.display === 'none' ? 'table-row' : 'none';
        }
    </script>
</body>
</html>'''
